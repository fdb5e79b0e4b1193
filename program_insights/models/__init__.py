"""
Input record models (frozen pydantic).  Normalization of loosely-typed API
values happens here and nowhere else.
"""
