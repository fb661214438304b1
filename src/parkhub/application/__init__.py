"""Application layer: DTOs, use-case services and their errors"""
