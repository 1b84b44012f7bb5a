"""
API Base — Security Package
============================

What:  Input sanitization, attack signatures, rate limiting and the request
       security filter.

Modules:
    exceptions   SecurityViolation hierarchy (codes SEC_001 … SEC_008)
    patterns     signature lists (content, URL, user agents, OS commands)
    service      string heuristics (sanitize, OS commands, traversal, hashing)
    stores       injectable rate-limit and cache stores
    rate_limit   fixed-window limiter
    validators   individual request checks
    middleware   SecurityMiddleware tying the checks together
"""
