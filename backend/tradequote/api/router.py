from fastapi import APIRouter

from tradequote.api.routes import health, auth, jobs, catalog, admin, settings, pricing, employees, schedule, support, invites

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])  # GET /
api_router.include_router(auth.router, prefix="/auth", tags=["auth"])  # POST /login, /login-json, /register; GET /me
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])  # jobs, assignments, audit, photos
api_router.include_router(catalog.router, tags=["catalog"])  # /trades, /specialties, /services, /user/specialties, /onboarding
api_router.include_router(admin.router, prefix="/admin", tags=["admin"])  # manage-users endpoints
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(pricing.router, tags=["pricing"])  # /regions, /pricing-rules, /pricing/estimate
api_router.include_router(employees.router, prefix="/employees", tags=["employees"])
api_router.include_router(schedule.router, prefix="/schedule", tags=["schedule"])
api_router.include_router(support.router, prefix="/support", tags=["support"])
api_router.include_router(invites.router, prefix="/invite", tags=["invites"])
