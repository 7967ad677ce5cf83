import logging

from fastapi import FastAPI

from service_orders.config import get_settings
from service_orders.infrastructure.api import router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(
    title="Sistema de Gestión de Órdenes de Servicio",
    description="API para administrar el ciclo de vida de órdenes de servicio técnico de electrodomésticos",
    version="1.0.0"
)

app.include_router(router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
