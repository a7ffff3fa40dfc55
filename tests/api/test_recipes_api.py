from __future__ import annotations


def _seed(repo) -> None:
    repo.add_recipe(id="r1", title="Pasta Carbonara", cuisine_type="Italian", status="favorite",
                    prep_time=10, cook_time=20)
    repo.add_recipe(id="r2", title="Chicken Tacos", cuisine_type="Mexican", difficulty="easy")
    repo.add_recipe(id="r3", title="Someone else's soup", user_id="user-2")


class TestListRecipes:
    def test_lists_own_recipes_newest_first(self, client, repo, auth_headers) -> None:
        _seed(repo)
        res = client.get("/recipes", headers=auth_headers)

        assert res.status_code == 200
        body = res.json()
        assert [r["id"] for r in body["recipes"]] == ["r2", "r1"]
        assert body["total"] == 2
        assert body["matched"] == 2
        assert body["state"] == "results"
        assert body["statusCounts"] == {"favorite": 1, "to_try": 1, "made_before": 0}
        assert body["cuisineTypes"] == ["Italian", "Mexican"]

    def test_summary_fields(self, client, repo, auth_headers) -> None:
        _seed(repo)
        body = client.get("/recipes", params={"q": "carbonara"}, headers=auth_headers).json()
        assert body["recipes"] == [
            {
                "id": "r1",
                "title": "Pasta Carbonara",
                "cuisineType": "Italian",
                "prepTime": 10,
                "cookTime": 20,
                "totalTime": 30,
                "difficulty": "medium",
                "status": "favorite",
                "coverImage": None,
            }
        ]

    def test_query_and_filters(self, client, repo, auth_headers) -> None:
        _seed(repo)
        body = client.get(
            "/recipes", params={"q": "ic", "difficulty": "easy"}, headers=auth_headers
        ).json()
        assert [r["id"] for r in body["recipes"]] == ["r2"]

        body = client.get("/recipes", params={"cuisineType": "Ital"}, headers=auth_headers).json()
        assert body["state"] == "no_matches"
        assert body["total"] == 2

    def test_empty_collection(self, client, auth_headers) -> None:
        body = client.get("/recipes", params={"q": "x"}, headers=auth_headers).json()
        assert body["state"] == "empty"
        assert body["cuisineTypes"][-1] == "Other"

    def test_invalid_filter(self, client, auth_headers) -> None:
        res = client.get("/recipes", params={"status": "burnt"}, headers=auth_headers)
        assert res.status_code == 400
        assert res.json()["detail"] == "Invalid status: burnt"

    def test_store_failure_renders_empty(self, client, repo, auth_headers) -> None:
        _seed(repo)
        repo.fail_on.add("list_recipes")
        res = client.get("/recipes", headers=auth_headers)
        assert res.status_code == 200
        assert res.json()["state"] == "empty"


class TestRecipeOptions:
    def test_options(self, client, auth_headers) -> None:
        body = client.get("/recipes/options", params={"unit": "c"}, headers=auth_headers).json()
        assert body["units"] == ["cups", "cloves"]
        assert body["difficulties"] == ["easy", "medium", "hard"]
        assert body["statuses"] == ["favorite", "to_try", "made_before"]
        assert body["queryDebounceMs"] == 300
        assert body["facetDebounceMs"] == 0


class TestCreateRecipe:
    def test_creates_recipe_with_children(self, client, repo, auth_headers) -> None:
        payload = {
            "title": "Shakshuka",
            "cuisineType": "Mediterranean",
            "prepTime": "10",
            "cookTime": 25,
            "servings": "4",
            "difficulty": "easy",
            "status": "to_try",
            "ingredients": [
                {"name": "", "quantity": "", "unit": ""},
                {"name": "eggs", "quantity": 6, "unit": "whole"},
            ],
            "instructions": [{"content": "Simmer sauce"}, {"content": "  "}, {"content": "Add eggs"}],
        }
        res = client.post("/recipes", json=payload, headers=auth_headers)

        assert res.status_code == 201
        body = res.json()
        assert body["location"] == f"/recipes/{body['id']}"

        stored = repo.recipes[body["id"]]
        assert stored["user_id"] == "user-1"
        assert stored["prep_time"] == 10
        assert stored["cook_time"] == 25
        assert stored["servings"] == 4
        assert [(i["name"], i["quantity"], i["order_index"]) for i in repo.ingredients] == [
            ("eggs", "6", 0)
        ]
        assert [(s["step_number"], s["content"]) for s in repo.instructions] == [
            (1, "Simmer sauce"),
            (2, "Add eggs"),
        ]

    def test_title_required(self, client, repo, auth_headers) -> None:
        res = client.post("/recipes", json={"title": "   "}, headers=auth_headers)
        assert res.status_code == 400
        assert res.json()["detail"] == "Recipe title is required"
        assert repo.recipes == {}

    def test_unknown_difficulty(self, client, auth_headers) -> None:
        res = client.post("/recipes", json={"title": "x", "difficulty": "extreme"}, headers=auth_headers)
        assert res.status_code == 422

    def test_child_failure_is_compensated(self, client, repo, auth_headers) -> None:
        repo.fail_on.add("insert_instructions")
        payload = {"title": "Bread", "instructions": [{"content": "Knead"}]}
        res = client.post("/recipes", json=payload, headers=auth_headers)

        assert res.status_code == 502
        assert res.json()["detail"] == "Failed to save recipe"
        assert repo.recipes == {}


class TestGetRecipe:
    def test_detail(self, client, repo, auth_headers) -> None:
        created = client.post(
            "/recipes",
            json={
                "title": "Pho",
                "description": "Beef noodle soup",
                "servings": 2,
                "ingredients": [{"name": "noodles", "quantity": "200", "unit": "g"}],
                "instructions": [{"content": "Simmer broth"}],
            },
            headers=auth_headers,
        ).json()

        res = client.get(f"/recipes/{created['id']}", headers=auth_headers)
        assert res.status_code == 200
        body = res.json()
        assert body["title"] == "Pho"
        assert body["description"] == "Beef noodle soup"
        assert body["servings"] == 2
        assert body["isPublic"] is False
        assert body["ingredients"][0]["name"] == "noodles"
        assert body["ingredients"][0]["orderIndex"] == 0
        assert body["instructions"][0]["stepNumber"] == 1

    def test_other_users_recipe_is_not_found(self, client, repo, auth_headers) -> None:
        _seed(repo)
        assert client.get("/recipes/r3", headers=auth_headers).status_code == 404

    def test_store_failure(self, client, repo, auth_headers) -> None:
        _seed(repo)
        repo.fail_on.add("list_ingredients")
        assert client.get("/recipes/r1", headers=auth_headers).status_code == 502
