"""
API Schemas - Pydantic models for response documentation and shaping

These schemas define the contract between the API and clients.
Request validation lives in llm_gateway so the CLI and services share it.
"""
