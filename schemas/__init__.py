"""
Mealwise Schemas
Pydantic request and response models
"""
