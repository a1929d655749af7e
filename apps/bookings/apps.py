from django.apps import AppConfig


class BookingsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.bookings"

    def ready(self) -> None:
        from shared.application.message_bus import message_bus

        from .application import handlers
        from .application.command_handlers import (
            CreateBookingCommand,
            CreateBookingHandler,
            TransitionBookingStatusCommand,
            TransitionBookingStatusHandler,
        )

        message_bus.register_command_handler(
            CreateBookingCommand, CreateBookingHandler().handle, replace=True
        )
        message_bus.register_command_handler(
            TransitionBookingStatusCommand, TransitionBookingStatusHandler().handle, replace=True
        )
        handlers.register(message_bus)
