#!/usr/bin/env python3
"""
Script de lancement direct pour la passerelle
"""

import uvicorn

from viewr.gateway.app import create_gateway_app
from viewr.shared.config import get_gateway_config


if __name__ == "__main__":
    config = get_gateway_config()
    print(f"🌐 Démarrage de la passerelle sur le port {config.service_port}...")
    uvicorn.run(
        create_gateway_app(),
        host="0.0.0.0",
        port=config.service_port,
        log_level=config.monitoring.log_level.lower()
    )
