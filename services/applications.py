"""Read-side helpers assembling full application views."""

from __future__ import annotations

from models.application import Application
from services.errors import ApplicationNotFound
from services.views import ApplicationView


def latest_application(user_id: str) -> Application | None:
    return (
        Application.query.filter_by(user_id=user_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
        .first()
    )


def get_owned_application(user_id: str, application_id: str) -> Application:
    application = Application.query.filter_by(id=application_id, user_id=user_id).first()
    if application is None:
        raise ApplicationNotFound()
    return application


def fetch_application_view(user_id: str) -> ApplicationView | None:
    """Return the user's most recent application with documents and appointment."""

    application = latest_application(user_id)
    if application is None:
        return None
    return ApplicationView.from_model(application)


def list_application_views(user_id: str) -> list[ApplicationView]:
    applications = (
        Application.query.filter_by(user_id=user_id)
        .order_by(Application.created_at.desc())
        .all()
    )
    return [ApplicationView.from_model(application) for application in applications]
