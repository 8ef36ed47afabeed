"""Security log normalizer service: core engine, HTTP API and CLI front ends."""
