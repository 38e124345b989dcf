"""
Contracts (data models).

This folder defines the request/response shapes and error types for the
MTN Mobile Money integration:
- PaymentRequest / Transaction / AccountHolder / AccountBalance
- the PaymentGateway interface both gateways implement
- the closed GatewayError taxonomy

Both the simulated and the live gateway use these contracts, so the
checkout flow never has to know which one it is talking to.
"""
