from fastapi import FastAPI
from backend.routers import rou_availability
from backend.configuration.monitor import instrument_fastapi

app = FastAPI(
    title="Tutoring School Availability API",
    description="Teacher availability, weekly schedules and free slots for a tutoring school",
    version="1.0.0"
)

app.include_router(rou_availability.router)

# Instrument app with Azure Monitor
instrument_fastapi(app)

if __name__ == '__main__':
    import uvicorn
    uvicorn.run(app, host='0.0.0.0', port=8000)
