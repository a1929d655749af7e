from django.apps import AppConfig


class ReservationsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.reservations"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .application import handlers
        from .application.command_handlers import (
            CreateReservationCartCommand,
            CreateReservationCartHandler,
            TransitionRequestStatusCommand,
            TransitionRequestStatusHandler,
        )

        message_bus.register_command_handler(
            CreateReservationCartCommand, CreateReservationCartHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            TransitionRequestStatusCommand, TransitionRequestStatusHandler().handle, replace=True
        )
        handlers.register(message_bus)
