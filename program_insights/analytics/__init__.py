"""
Analytics engine: turns program + beneficiary snapshots into phases, scores,
rankings and suggestions.  Every function here is pure: ``now`` is always an
argument, inputs are never mutated, and nothing is cached between calls.

Modules
-------
metrics     : ProgramMetrics + compute_program_metrics() + effective_status().
phases      : classify_phase() + compute_phase_timeline().
health      : compute_health_breakdown() + explain_health_score().
efficiency  : average_processing_days() + compute_efficiency_score().
ranking     : compute_global_maxima() + rank_programs() + top_programs().
suggestions : rule tables + generate_program_suggestions()
              + generate_portfolio_suggestions().
report      : build_program_report(): one program, all engines.
portfolio   : build_portfolio_summary() + drill-down helpers.
"""
