#!/usr/bin/env python3
"""
Script de lancement direct pour le service Dental
"""

import uvicorn

from viewr.dental.app import create_dental_app
from viewr.shared.config import get_dental_config


if __name__ == "__main__":
    config = get_dental_config()
    print(f"🦷 Démarrage du service Dental sur le port {config.service_port}...")
    uvicorn.run(
        create_dental_app(),
        host="0.0.0.0",
        port=config.service_port,
        log_level=config.monitoring.log_level.lower()
    )
