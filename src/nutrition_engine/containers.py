"""Dependency container wiring for the engine."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_engine.adapters.openai_synthesis_client import OpenAISynthesisClient
from nutrition_engine.adapters.supabase_audit_repository import SupabaseAuditRepository
from nutrition_engine.adapters.supabase_catalog_repository import (
    SupabaseIngredientRepository,
    SupabaseRecipeRepository,
)
from nutrition_engine.adapters.supabase_goal_repository import SupabaseGoalRepository
from nutrition_engine.adapters.supabase_meal_log_repository import (
    SupabaseMealLogRepository,
)
from nutrition_engine.adapters.supabase_meal_plan_repository import (
    SupabaseMealPlanRepository,
)
from nutrition_engine.adapters.supabase_suggestion_repository import (
    SupabaseSuggestionBatchRepository,
)
from nutrition_engine.config import Settings
from nutrition_engine.services.audit import AuditService
from nutrition_engine.services.budget import BudgetService
from nutrition_engine.services.consumption import ConsumptionService
from nutrition_engine.services.meal_plans import MealPlanService
from nutrition_engine.services.recipes import RecipeService
from nutrition_engine.services.selection import SelectionPolicy
from nutrition_engine.services.shopping import ShoppingListService
from nutrition_engine.services.suggestions import SuggestionService
from nutrition_engine.services.synthesis import LlmRecipeSynthesizer


@dataclass
class AppContainer:
    """Holds engine-wide dependencies."""

    settings: Settings
    recipe_service: RecipeService
    consumption_service: ConsumptionService
    budget_service: BudgetService
    suggestion_service: SuggestionService
    shopping_list_service: ShoppingListService
    meal_plan_service: MealPlanService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    ingredient_repository = SupabaseIngredientRepository(supabase_client)
    recipe_repository = SupabaseRecipeRepository(supabase_client)
    meal_log_repository = SupabaseMealLogRepository(supabase_client)
    meal_plan_repository = SupabaseMealPlanRepository(supabase_client)
    goal_repository = SupabaseGoalRepository(supabase_client)
    batch_repository = SupabaseSuggestionBatchRepository(supabase_client)
    audit_repository = SupabaseAuditRepository(supabase_client)

    recipe_service = RecipeService(ingredient_repository, recipe_repository)
    consumption_service = ConsumptionService(meal_log_repository)
    budget_service = BudgetService(goal_repository, consumption_service)
    openai_client = OpenAISynthesisClient.create(
        resolved_settings.openai_api_key,
        timeout_seconds=resolved_settings.synthesis_timeout_seconds,
    )
    synthesizer = LlmRecipeSynthesizer(
        client=openai_client,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    suggestion_service = SuggestionService(
        budget_service=budget_service,
        recipe_service=recipe_service,
        batch_repository=batch_repository,
        synthesizer=synthesizer,
        audit_service=AuditService(audit_repository),
        policy=SelectionPolicy.from_settings(resolved_settings),
        synthesis_timeout_seconds=resolved_settings.synthesis_timeout_seconds,
    )
    shopping_list_service = ShoppingListService(
        meal_plan_repository=meal_plan_repository,
        ingredient_repository=ingredient_repository,
        recipe_repository=recipe_repository,
    )
    meal_plan_service = MealPlanService(meal_plan_repository, recipe_service)

    async def close_resources() -> None:
        await openai_client.close()

    return AppContainer(
        settings=resolved_settings,
        recipe_service=recipe_service,
        consumption_service=consumption_service,
        budget_service=budget_service,
        suggestion_service=suggestion_service,
        shopping_list_service=shopping_list_service,
        meal_plan_service=meal_plan_service,
        close_resources=close_resources,
    )
