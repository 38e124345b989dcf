"""
Real HTTP integration clients.

These clients communicate with the MTN MoMo Collection API via httpx:
- mtn_auth.py: OAuth access token lifecycle
- mtn.py: request-to-pay, status, account holder and balance calls

Important:
- Must implement the same PaymentGateway contract as the simulated gateway
- Must translate every upstream failure into contracts/errors.py types

Switching:
The selection of simulated vs live clients happens in
safaritix/integrations/selector.py only.
"""
