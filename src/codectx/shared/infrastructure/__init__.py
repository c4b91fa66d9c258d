"""Infrastructure: settings, logging, caching and resilience patterns."""
