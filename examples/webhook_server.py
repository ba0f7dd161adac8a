"""Example app server implementation."""

import json

from saleor_checkout_app import AppConfig, create_webhook_app


# Load configuration
with open('config.json') as f:
    config_data = json.load(f)

config = AppConfig(**config_data)

# Serves /api/manifest, /api/register and /api/webhooks/checkout-fully-paid
app = create_webhook_app(config)

# Run with: uvicorn examples.webhook_server:app --reload
