"""
Fee ledger services. Views call exactly one of these per request.
"""
