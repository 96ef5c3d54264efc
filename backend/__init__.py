# backend -- FastAPI server + PostgreSQL / SQLite models
#
# Modules:
#   app        -- FastAPI application, lifespan, error translation
#   database   -- async engine (asyncpg / aiosqlite)
#   models     -- SQLAlchemy ORM models (accounts, transactions, listings, admin config)
#   schemas    -- Pydantic request/response schemas
#   security   -- bcrypt password hashes + JWT bearer tokens
#   deps       -- request dependencies: session context, service wiring
#   seed       -- schema + admin + config + demo catalog
#   routes/    -- API endpoints (auth, users, listings, transactions, admin, config)
