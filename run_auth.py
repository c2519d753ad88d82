#!/usr/bin/env python3
"""
Script de lancement direct pour le service Auth
"""

import uvicorn

from viewr.auth.app import create_auth_app
from viewr.shared.config import get_auth_config


if __name__ == "__main__":
    config = get_auth_config()
    print(f"🔐 Démarrage du service Auth sur le port {config.service_port}...")
    uvicorn.run(
        create_auth_app(),
        host="0.0.0.0",
        port=config.service_port,
        log_level=config.monitoring.log_level.lower()
    )
