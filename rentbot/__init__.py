"""WhatsApp Rent Bot

Lets landlords manage rent over WhatsApp:
- Records rent payments described in plain language
- Answers whether a tenant has paid for a month
- Sends PDF receipts to tenants
"""

__version__ = "1.0.0"
