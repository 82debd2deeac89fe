"""
BeBrand Email Package.

Modules:
- core: Base send_email function (Brevo transactional email API)
- store: Order confirmation template and the OrderNotifier used by checkout
"""
