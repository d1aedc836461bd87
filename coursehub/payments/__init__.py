"""Mobile-money payments: phone normalization, USSD strings, gateway, checkout."""
