"""Default icons: generators, providers and the provider registry."""
