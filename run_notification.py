#!/usr/bin/env python3
"""
Script de lancement direct pour le service Notification
"""

import uvicorn

from viewr.notification.app import create_notification_app
from viewr.shared.config import get_notification_config


if __name__ == "__main__":
    config = get_notification_config()
    print(f"🔔 Démarrage du service Notification sur le port {config.service_port}...")
    uvicorn.run(
        create_notification_app(),
        host="0.0.0.0",
        port=config.service_port,
        log_level=config.monitoring.log_level.lower()
    )
