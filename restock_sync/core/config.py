"""
Configuracion central de la aplicacion.
Gestiona variables de entorno y configuraciones globales.
Los valores se leen del entorno y, si existe, del archivo .env.
"""
from pydantic_settings import BaseSettings
from pydantic import Field, computed_field


class Settings(BaseSettings):
    """
    Clase de configuracion de la aplicacion.
    Lee variables de entorno y proporciona valores por defecto.
    
    Las credenciales de Cin7 y DATABASE_URL no tienen default util:
    se validan al construir el pipeline (ver sync_service.build_from_env),
    antes de cualquier request.
    """
    
    # Configuracion de la aplicacion
    APP_NAME: str = Field(default="Restock Sync")
    APP_VERSION: str = Field(default="1.0.0")
    ENVIRONMENT: str = Field(default="production")
    
    # Configuracion del relay HTTP
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3001)
    SYNC_SUBPROCESS_TIMEOUT_S: int = Field(default=1800)
    
    # Cin7 (API origen)
    CIN7_API_URL: str = Field(default="")
    CIN7_USERNAME: str = Field(default="")
    CIN7_API_KEY: str = Field(default="")
    CIN7_PAGE_SIZE: int = Field(default=250)
    CIN7_TIMEOUT_S: int = Field(default=30)
    # Espaciado minimo entre llamadas al API (rate limit de Cin7)
    CIN7_MIN_INTERVAL_MS: int = Field(default=500)
    # Pausa extra entre dias de un rango
    SYNC_DAY_PACING_MS: int = Field(default=2000)
    
    # Base de datos destino (postgresql://...)
    DATABASE_URL: str = Field(default="")
    UPSERT_BATCH_SIZE: int = Field(default=100)
    
    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FILE: str = Field(default="logs/restock_sync.log")
    
    @computed_field
    @property
    def is_development(self) -> bool:
        """Indica si el entorno es de desarrollo."""
        return self.ENVIRONMENT.lower() == "development"
    
    class Config:
        """Configuracion de Pydantic."""
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignorar campos extra del .env


# Instancia global de configuracion
settings = Settings()
