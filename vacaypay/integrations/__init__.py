"""
Integration modules

Contains adapters for external payment systems:
- Payment gateways (VacayPay, with Stripe card tokenization)
"""
