"""
Pipeline de sincronización one-way: Cin7 -> PostgreSQL.

Este paquete está diseñado para ejecutarse como job (cron / relay HTTP que
lanza un subproceso), no como parte del request/response del API.

Objetivos de diseño:
- Idempotencia: se puede ejecutar N veces sobre el mismo rango sin duplicar datos.
- Progreso parcial máximo: un día o un chunk que falla no aborta el resto.
- Tolerancia a un API inestable: fallback entre endpoints candidatos y
  filtros client-side cuando Cin7 ignora los filtros del servidor.
- Control total: mapeo/transformaciones/claves naturales en código.
"""
