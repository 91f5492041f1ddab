"""Spotify OAuth relay: state token, provider client and route handlers."""
