"""Models for recipe synthesis proposals."""

from pydantic import BaseModel, Field


class ProposedLine(BaseModel):
    """Ingredient line of a proposed recipe."""

    ingredient_id: str
    amount: float = Field(allow_inf_nan=False)


class ProposedRecipe(BaseModel):
    """A new recipe proposed by the synthesis collaborator."""

    name: str = Field(min_length=1)
    description: str | None = None
    ingredient_lines: list[ProposedLine]
    instructions: list[str] = Field(default_factory=list)


class ExistingRecipeRef(BaseModel):
    """A proposal to reuse a catalog recipe."""

    recipe_id: str


class SynthesisExtract(BaseModel):
    """Structured output for recipe synthesis."""

    new_recipes: list[ProposedRecipe] = Field(default_factory=list)
    existing_recipes: list[ExistingRecipeRef] = Field(default_factory=list)

    def candidates(self) -> list[ProposedRecipe | ExistingRecipeRef]:
        """Return existing references first, then new recipes."""
        return [*self.existing_recipes, *self.new_recipes]
