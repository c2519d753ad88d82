#!/usr/bin/env python3
"""
Script de lancement de la passerelle et des microservices Viewr
"""

import subprocess
import sys
import time
import signal
from pathlib import Path
from typing import Dict, List, Optional

import psutil

from viewr import SERVICES


class ServiceManager:
    """Gestionnaire des microservices"""

    def __init__(self, names: Optional[List[str]] = None):
        # Les microservices démarrent avant la passerelle
        order = ["dental", "auth", "notification", "gateway"]
        selected = names or order
        self.services = [
            {
                "key": key,
                "name": SERVICES[key]["name"],
                "script": f"run_{key}.py",
                "port": SERVICES[key]["port"],
                "description": SERVICES[key]["description"]
            }
            for key in order if key in selected
        ]
        self.processes: Dict[str, subprocess.Popen] = {}

    def check_port_available(self, port: int) -> bool:
        """Vérifie si un port est disponible"""
        for conn in psutil.net_connections():
            if conn.laddr and conn.laddr.port == port:
                return False
        return True

    def start_service(self, service: dict) -> Optional[subprocess.Popen]:
        """Démarre un service spécifique"""
        print(f"🚀 Démarrage {service['name']} sur le port {service['port']}...")

        if not self.check_port_available(service['port']):
            print(f"⚠️  Port {service['port']} déjà utilisé pour {service['name']}")
            return None

        try:
            process = subprocess.Popen([
                sys.executable, service['script']
            ], cwd=Path(__file__).parent)
        except OSError as e:
            print(f"❌ Erreur démarrage {service['name']}: {e}")
            return None

        # Attendre un peu pour vérifier que le service démarre
        time.sleep(2)

        if process.poll() is None:
            print(f"✅ {service['name']} démarré avec succès (PID: {process.pid})")
            return process

        print(f"❌ Échec du démarrage de {service['name']}")
        return None

    def start_all_services(self):
        """Démarre tous les services"""
        print("🌟 Démarrage des services Viewr")
        print("=" * 50)

        for service in self.services:
            print(f"\n📋 {service['description']}")
            process = self.start_service(service)
            if process:
                self.processes[service['key']] = process
            time.sleep(1)

        if self.processes:
            print(f"\n🎉 {len(self.processes)} services démarrés avec succès!")
            self.print_status()
        else:
            print("\n❌ Aucun service n'a pu être démarré")

    def print_status(self):
        """Affiche le statut des services"""
        print("\n" + "=" * 50)
        print("📊 STATUT DES SERVICES")
        print("=" * 50)

        for service in self.services:
            process = self.processes.get(service['key'])
            if process and process.poll() is None:
                status = "🟢 RUNNING"
                pid = process.pid
            else:
                status = "🔴 STOPPED"
                pid = "N/A"

            print(f"{service['name']:<22} {status:<12} Port: {service['port']:<6} PID: {pid}")

        print("\n🌐 URLs d'accès:")
        for service in self.services:
            print(f"• {service['name']}: http://localhost:{service['port']}/docs")

        print("\n💡 Pour arrêter tous les services: Ctrl+C")

    def stop_all_services(self):
        """Arrête tous les services, la passerelle en premier"""
        print("\n🛑 Arrêt des services...")

        for service in reversed(self.services):
            process = self.processes.get(service['key'])
            if not process or process.poll() is not None:
                continue

            print(f"🔄 Arrêt de {service['name']}...")
            try:
                process.terminate()
                process.wait(timeout=5)
                print(f"✅ {service['name']} arrêté")
            except subprocess.TimeoutExpired:
                print(f"⚠️  Force l'arrêt de {service['name']}...")
                process.kill()
                process.wait()
                print(f"✅ {service['name']} forcé à s'arrêter")

        self.processes.clear()
        print("✅ Tous les services ont été arrêtés")

    def monitor_services(self):
        """Surveille les services en continu"""
        try:
            print("\n🔍 Surveillance des services (Ctrl+C pour arrêter)...")
            while True:
                time.sleep(30)

                running_count = 0
                for service in self.services:
                    process = self.processes.get(service['key'])
                    if process and process.poll() is None:
                        running_count += 1
                    elif process:
                        print(f"⚠️  {service['name']} s'est arrêté de manière inattendue")

                if running_count == 0:
                    print("❌ Tous les services se sont arrêtés")
                    break

        except KeyboardInterrupt:
            print("\n⏹️  Interruption demandée par l'utilisateur")
        finally:
            self.stop_all_services()


def main():
    """Point d'entrée principal"""
    print("🤖 Viewr Services Manager")
    print("Version 1.0.0")
    print()

    manager = ServiceManager(sys.argv[1:] or None)

    def signal_handler(signum, frame):
        print("\n⚠️  Signal d'arrêt reçu")
        manager.stop_all_services()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    manager.start_all_services()
    if manager.processes:
        manager.monitor_services()


if __name__ == "__main__":
    main()
