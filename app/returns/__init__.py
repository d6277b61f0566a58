"""
Returns application.

Returns lifecycle and points reconciliation:
- eligibility: which sold license keys may still be returned
- calculator: monetary refund and proportional points refund
- services: the return state machine and its side effects
- queries: operator listings and summaries
"""
