"""
Wallet application.

Store credit instruments issued as non-cash refunds. The returns engine
reaches this app only through returns.protocols.StoreCreditIssuer.
"""
