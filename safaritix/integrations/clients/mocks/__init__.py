"""
Simulated integration clients.

These clients return fake (but realistic) responses without calling MTN.
They are used when:
- MTN sandbox credentials are not available
- We want to test the checkout flow end-to-end without external dependencies

Important:
- The simulated gateway must follow the SAME PaymentGateway contract as the
  live one, including the error types it raises.
- Outcomes are deterministic per payer and amount (outcomes.py).

Switching to live:
Set PAYMENT_GATEWAY_MODE=live (or MTN_USE_MOCK=false) and configure the MTN
credentials; safaritix/integrations/selector.py does the rest.
"""
