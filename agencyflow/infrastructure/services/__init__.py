"""Infrastructure services: step handlers, templating, notifications, engine facade."""
