"""HTTP tests for /projects."""


class TestProjects:
    def test_create_and_read(self, client, headers, org):
        created = client.post("/projects/", json={"name": "Website", "slug": "website"}, headers=headers)

        assert created.status_code == 200
        body = created.json()
        assert body["organization_id"] == org.id
        assert body["task_count"] == 0
        assert body["created_by"]["name"] == "Ada"

        by_id = client.get(f"/projects/{body['id']}", headers=headers)
        by_slug = client.get("/projects/slug/website", headers=headers)
        assert by_id.json()["id"] == by_slug.json()["id"] == body["id"]

    def test_slug_must_be_kebab_case(self, client, headers):
        response = client.post("/projects/", json={"name": "Website", "slug": "Web Site"}, headers=headers)

        assert response.status_code == 422

    def test_duplicate_slug_is_conflict(self, client, headers, project):
        response = client.post("/projects/", json={"name": "Again", "slug": project.slug}, headers=headers)

        assert response.status_code == 409

    def test_same_slug_allowed_in_another_organization(self, client, project, make_user, make_org, auth_headers):
        grace = make_user("Grace")
        globex_headers = auth_headers(grace, make_org(grace, "globex"))

        response = client.post("/projects/", json={"name": "Website", "slug": project.slug}, headers=globex_headers)

        assert response.status_code == 200

    def test_list_hides_archived_and_searches(self, client, headers, make_project, org):
        make_project(org, "website", name="Website")
        old = make_project(org, "legacy", name="Legacy site")
        client.patch(f"/projects/{old.id}/archive", json={"is_archived": True}, headers=headers)

        active = client.get("/projects/", headers=headers).json()
        everything = client.get("/projects/", params={"include_archived": True}, headers=headers).json()
        searched = client.get("/projects/", params={"search": "legacy", "include_archived": True},
                              headers=headers).json()

        assert [p["slug"] for p in active] == ["website"]
        assert {p["slug"] for p in everything} == {"website", "legacy"}
        assert [p["slug"] for p in searched] == ["legacy"]

    def test_update_slug_conflict(self, client, headers, make_project, org):
        make_project(org, "website")
        blog = make_project(org, "blog")

        response = client.put(f"/projects/{blog.id}", json={"slug": "website"}, headers=headers)

        assert response.status_code == 409

    def test_update(self, client, headers, project):
        response = client.put(f"/projects/{project.id}", json={"name": "Marketing site", "color": "blue"},
                              headers=headers)

        assert response.json()["name"] == "Marketing site"
        assert response.json()["slug"] == "website"
        assert response.json()["color"] == "blue"

    def test_delete_removes_tasks(self, client, headers, project, make_task):
        make_task("a")

        response = client.delete(f"/projects/{project.id}", headers=headers)

        assert response.json() == {"success": True, "id": project.id}
        assert client.get(f"/projects/{project.id}", headers=headers).status_code == 404

    def test_other_organization_sees_not_found(self, client, project, make_user, make_org, auth_headers):
        grace = make_user("Grace")
        globex_headers = auth_headers(grace, make_org(grace, "globex"))

        assert client.get(f"/projects/{project.id}", headers=globex_headers).status_code == 404
        assert client.get("/projects/slug/website", headers=globex_headers).status_code == 404
        assert client.get("/projects/", headers=globex_headers).json() == []
