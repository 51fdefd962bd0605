"""Domain layer: snapshot models, tree transcoding, layout rules, errors.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
