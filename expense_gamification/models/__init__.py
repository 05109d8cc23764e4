"""Pydantic and dataclass models"""
