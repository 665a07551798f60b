#!/usr/bin/env python3
"""
Script para ejecutar la API con uvicorn cargando las variables de entorno del .env
"""
import os
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

env_path = Path(__file__).parent / ".env"
if env_path.exists():
    load_dotenv(env_path, override=True)
    print(f"✓ Variables de entorno cargadas desde {env_path}")
else:
    print(f"⚠ Archivo .env no encontrado en {env_path}")

host = os.getenv("HOST", "0.0.0.0")
port = int(os.getenv("PORT", "5000"))
debug = os.getenv("DEBUG", "False").lower() == "true"

if __name__ == "__main__":
    print(f"🚀 Iniciando servidor en http://{host}:{port} (debug={debug})")
    uvicorn.run(
        "tokenforge.main:app",
        host=host,
        port=port,
        reload=debug,
        log_level="debug" if debug else "info",
    )
