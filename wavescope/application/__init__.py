"""Application layer: controller events and the event bus."""
