from .appointments import router as appointments_router
from .auth import router as auth_router
from .auth import user_router
from .budgets import router as budgets_router
from .catalog import locations_router, services_router
from .notifications import router as notifications_router
from .patients import router as patients_router
from .treatments import prescriptions_router
from .treatments import router as treatments_router

ROUTERS = (
    auth_router,
    user_router,
    patients_router,
    budgets_router,
    treatments_router,
    prescriptions_router,
    appointments_router,
    notifications_router,
    locations_router,
    services_router,
)
