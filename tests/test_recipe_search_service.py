"""Catalog-backed search, single-recipe matches and ingredient vocabulary."""

from schemas.dto import RecipeSearchRequest
from services.ingredients import count_recipes_using, distinct_ingredient_names, search_ingredients
from services.recipes import (
    available_ingredients, example_search_request, find_recipes_by_ingredients,
    missing_ingredients, published_recipes, recipe_match
)


class TestFindRecipesByIngredients:

    def test_perfect_match(self, make_recipe):
        make_recipe("Chicken Rice", ["Chicken", "Rice", "Onion"],
                    images=[("http://example.com/image.jpg", True)])

        page = find_recipes_by_ingredients(
            RecipeSearchRequest(available_ingredients=["Chicken", "Rice", "Onion"]), page=0, size=10)

        assert page.total_items == 1
        match = page.content[0]
        assert match.title == "Chicken Rice"
        assert match.match_percentage == 100.0
        assert match.missing_ingredients == []
        assert len(match.available_ingredients) == 3
        assert match.primary_image_url == "http://example.com/image.jpg"
        assert match.author_username == "author"

    def test_unpublished_recipes_ignored(self, make_recipe):
        make_recipe("Draft", ["chicken"], published=False)
        make_recipe("Live", ["chicken"])

        page = find_recipes_by_ingredients(RecipeSearchRequest(available_ingredients=["chicken"]))

        assert [m.title for m in page.content] == ["Live"]
        assert len(published_recipes()) == 1

    def test_category_filter(self, make_recipe, make_category):
        soup = make_category("Soup")
        salad = make_category("Salad")
        make_recipe("Tomato Soup", ["tomato"], categories=[soup])
        make_recipe("Tomato Salad", ["tomato"], categories=[salad])

        page = find_recipes_by_ingredients(
            RecipeSearchRequest(available_ingredients=["tomato"], category_ids=[soup.id]))

        assert [m.title for m in page.content] == ["Tomato Soup"]
        assert page.content[0].categories == ["Soup"]


class TestSingleRecipeMatch:

    def test_missing_and_available(self, make_recipe):
        r = make_recipe("Chicken Rice", ["Chicken", "Rice", "Onion"])

        assert missing_ingredients(r.id, ["chicken", "rice"]) == ["onion"]
        assert available_ingredients(r.id, ["chicken", "rice"]) == ["chicken", "rice"]

    def test_unknown_recipe_is_zero_match(self, app):
        m = recipe_match(999, ["chicken"])

        assert m.match_percentage == 0.0
        assert m.missing_ingredients == []
        assert m.available_ingredients == []
        assert missing_ingredients(999, ["chicken"]) == []


class TestIngredientVocabulary:

    def test_distinct_normalized_names(self, make_recipe):
        make_recipe("A", ["Chicken", " rice"])
        make_recipe("B", ["chicken", "Garlic"])
        make_recipe("Hidden", ["saffron"], published=False)

        assert distinct_ingredient_names() == ["chicken", "garlic", "rice"]

    def test_substring_query(self, make_recipe):
        make_recipe("A", ["Chicken Breast", "Chickpeas", "Rice"])

        assert distinct_ingredient_names("CHICK") == ["chicken breast", "chickpeas"]

    def test_query_wildcards_are_literal(self, make_recipe):
        make_recipe("A", ["rice", "100% cocoa"])

        assert distinct_ingredient_names("%") == ["100% cocoa"]

    def test_counts_published_recipes(self, make_recipe):
        make_recipe("A", ["Chicken"])
        make_recipe("B", ["chicken ", "rice"])
        make_recipe("C", ["chicken"], published=False)

        assert count_recipes_using("CHICKEN") == 2
        assert count_recipes_using("tofu") == 0

    def test_search_items(self, make_recipe):
        make_recipe("A", ["chicken", "rice"])
        make_recipe("B", ["rice"])

        items = search_ingredients("  ")
        assert [(i.name, i.recipe_count) for i in items] == [("chicken", 1), ("rice", 2)]


def test_example_request():
    example = example_search_request()
    assert example.available_ingredients == ["chicken", "rice", "onion", "garlic"]
    assert example.min_match_percentage == 50.0
    assert example.sort_by == "matchPercentage"
