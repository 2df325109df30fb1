#!/usr/bin/env python3
"""
Script per avviare il backend di range analysis in sviluppo
"""
import uvicorn

if __name__ == "__main__":
    print("Avvio Range Analysis Backend...")
    print("API disponibile su: http://localhost:8000/api/v1")
    print("Documentazione Swagger (solo con RANGEOPS_DEBUG=true): http://localhost:8000/docs")
    print("Ricaricamento automatico attivo\n")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        reload_dirs=["app"],
    )
