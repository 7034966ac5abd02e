"""Schema-checked design critiques from an LLM completion endpoint.

Entry points:
- design_review.review: the structured-generation pipeline
- design_review.api: FastAPI app exposing POST /review
"""
