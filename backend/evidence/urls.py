"""
Evidence app URL configuration.

All routes are registered under the ``/api/`` prefix (included from
``backend.urls``).

Route Hierarchy
---------------
  /api/evidence/                               → list (browse) / create (submit)
  /api/evidence/cases/                         → distinct case ids

  /api/access-requests/                        → list visible / create
  POST /api/access-requests/{id}/approve/      → decide: approved
  POST /api/access-requests/{id}/deny/         → decide: denied
"""

from rest_framework.routers import DefaultRouter

from .views import AccessRequestViewSet, EvidenceViewSet

router = DefaultRouter()
router.register(
    prefix=r"evidence",
    viewset=EvidenceViewSet,
    basename="evidence",
)
router.register(
    prefix=r"access-requests",
    viewset=AccessRequestViewSet,
    basename="access-request",
)

urlpatterns = router.urls
