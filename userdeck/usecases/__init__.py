"""Use-case helpers shared by view models.

The error mapping turns adapter failures into ``UseCaseError`` values that
screens can show without knowing transport details.
"""
