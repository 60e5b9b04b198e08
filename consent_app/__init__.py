"""OAuth2/OpenID Connect consent service."""
