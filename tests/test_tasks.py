# ========== TEST CREATE TASK ==========
def test_create_task_success(client):
    """Tester la création réussie d'une tâche"""
    response = client.post(
        "/tasks",
        json={"title": "Ma première tâche", "priority": "high", "status": "todo"}
    )
    assert response.status_code == 201
    data = response.json()
    assert data["title"] == "Ma première tâche"
    assert data["priority"] == "high"
    assert data["status"] == "todo"
    assert data["order"] == 0
    assert data["completed"] == False


def test_create_task_defaults(client):
    """Tester les valeurs par défaut"""
    data = client.post("/tasks", json={"title": "Simple"}).json()
    assert data["priority"] == "medium"
    assert data["status"] == "todo"
    assert data["description"] is None


def test_create_task_appends_to_column(client, make_task):
    """Tester l'ordre à la création : max + 1"""
    make_task("Un")
    make_task("Deux")
    third = make_task("Trois")
    assert third["order"] == 2


def test_create_task_validation(client):
    """Tester les erreurs de validation"""
    assert client.post("/tasks", json={"title": ""}).status_code == 422
    assert client.post("/tasks", json={"title": "x" * 101}).status_code == 422
    assert client.post("/tasks", json={"title": "A", "status": "archived"}).status_code == 422
    assert client.post("/tasks", json={"title": "A", "priority": "urgent"}).status_code == 422


# ========== TEST LIST TASKS ==========
def test_list_tasks_empty(client):
    """Tester la liste vide des tâches"""
    response = client.get("/tasks")
    assert response.status_code == 200
    assert response.json() == []


#TEST FILTER
def test_filter_tasks_by_priority(client, make_task):
    """Tester le filtrage par priorité"""
    make_task("Low", priority="low")
    make_task("High 1", priority="high")
    make_task("High 2", priority="high")

    data = client.get("/tasks?priority_filter=high").json()
    assert len(data) == 2
    assert all(t["priority"] == "high" for t in data)


def test_filter_tasks_by_status_and_completion(client, make_task):
    """Tester le filtrage par statut et complétion"""
    make_task("Todo", status="todo")
    make_task("Done 1", status="done")
    make_task("Done 2", status="done")

    data = client.get("/tasks?status_filter=done").json()
    assert len(data) == 2
    assert all(t["status"] == "done" for t in data)

    data = client.get("/tasks?completed=false").json()
    assert [t["title"] for t in data] == ["Todo"]


def test_list_tasks_invalid_sort(client):
    assert client.get("/tasks?sort=random").status_code == 422


#TEST GET TASK
def test_get_task_not_found(client):
    response = client.get("/tasks/does-not-exist")
    assert response.status_code == 404


#TEST UPDATE TASK
def test_update_task_success(client, make_task):
    """Tester la modification d'une tâche"""
    task_id = make_task("Tâche originale", priority="low")["id"]

    response = client.put(
        f"/tasks/{task_id}",
        json={"title": "Tâche modifiée", "priority": "high"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Tâche modifiée"
    assert data["priority"] == "high"


def test_update_task_status_syncs_completed(client, make_task):
    """Tester que completed suit le statut done"""
    task_id = make_task("Tâche")["id"]

    data = client.put(f"/tasks/{task_id}", json={"status": "done"}).json()
    assert data["completed"] == True

    data = client.put(f"/tasks/{task_id}", json={"status": "in-progress"}).json()
    assert data["completed"] == False


def test_update_task_null_required_fields(client, make_task):
    """Tester que title/priority à null sont refusés (422, pas 500)"""
    task_id = make_task("Tâche", priority="high")["id"]

    assert client.put(f"/tasks/{task_id}", json={"priority": None}).status_code == 422
    assert client.put(f"/tasks/{task_id}", json={"title": None}).status_code == 422

    data = client.get(f"/tasks/{task_id}").json()
    assert (data["title"], data["priority"]) == ("Tâche", "high")


#TEST DELETE TASK
def test_delete_task(client, make_task):
    task_id = make_task("À supprimer")["id"]

    assert client.delete(f"/tasks/{task_id}").status_code == 204
    assert client.get(f"/tasks/{task_id}").status_code == 404
    assert client.delete(f"/tasks/{task_id}").status_code == 404


#TEST UPDATE TASK STATUS
def test_update_task_status(client, make_task):
    """Tester le changement de statut d'une tâche"""
    make_task("Déjà en cours", status="in-progress")
    task_id = make_task("Tâche", status="todo")["id"]

    response = client.post(f"/tasks/{task_id}/status?new_status=in-progress")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "in-progress"
    assert data["order"] == 1


def test_update_task_status_same_column_keeps_position(client, make_task):
    """Même statut : la tâche reste à sa place"""
    a = make_task("A")
    make_task("B")
    make_task("C")

    response = client.post(f"/tasks/{a['id']}/status?new_status=todo")
    assert response.status_code == 200
    assert response.json()["order"] == 0

    todo = client.get("/tasks?status_filter=todo").json()
    assert [t["title"] for t in todo] == ["A", "B", "C"]


def test_update_task_status_invalid(client, make_task):
    task_id = make_task("Tâche")["id"]
    response = client.post(f"/tasks/{task_id}/status?new_status=cancelled")
    assert response.status_code == 400


#TEST TOGGLE
def test_toggle_task(client, make_task):
    task_id = make_task("Tâche", status="in-progress")["id"]

    data = client.post(f"/tasks/{task_id}/toggle").json()
    assert (data["status"], data["completed"]) == ("done", True)

    data = client.post(f"/tasks/{task_id}/toggle").json()
    assert (data["status"], data["completed"]) == ("todo", False)


# ========== TEST MOVE ==========
def test_move_task_between_neighbours(client, make_task):
    """[0, 1, 2] + déplacement à l'index 1 → 0.5"""
    make_task("A")
    make_task("B")
    make_task("C")
    task_id = make_task("Nouvelle", status="backlog")["id"]

    response = client.post(f"/tasks/{task_id}/move", json={"status": "todo", "index": 1})
    assert response.status_code == 200
    data = response.json()
    assert data["order"] == 0.5
    assert data["status"] == "todo"

    orders = [t["order"] for t in client.get("/tasks?status_filter=todo").json()]
    assert orders == [0, 0.5, 1, 2]


def test_move_task_to_empty_column(client, make_task):
    make_task("Autre")
    task = make_task("Tâche", order=5)

    data = client.post(f"/tasks/{task['id']}/move", json={"status": "in-progress", "index": 0}).json()
    assert data["order"] == 0
    assert data["status"] == "in-progress"
    assert data["completed"] == False


def test_move_task_into_done(client, make_task):
    task_id = make_task("Tâche")["id"]
    data = client.post(f"/tasks/{task_id}/move", json={"status": "done"}).json()
    assert data["completed"] == True


def test_move_task_not_found(client):
    response = client.post("/tasks/missing/move", json={"status": "todo", "index": 0})
    assert response.status_code == 404


# ========== TEST BATCH UPDATE ==========
def test_batch_update(client, make_task):
    a = make_task("A")
    b = make_task("B")

    response = client.put("/tasks/batch-update", json={"todos": [
        {"id": a["id"], "status": "done", "order": 4},
        {"id": b["id"], "status": "backlog"},
    ]})
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "2 task(s) updated"
    assert data["todos"][0]["completed"] == True
    assert data["todos"][0]["order"] == 4
    assert data["todos"][1]["order"] == 1


def test_batch_update_unknown_id_writes_nothing(client, make_task):
    a = make_task("A")

    response = client.put("/tasks/batch-update", json={"todos": [
        {"id": a["id"], "status": "done", "order": 4},
        {"id": "missing", "status": "done"},
    ]})
    assert response.status_code == 404
    assert client.get(f"/tasks/{a['id']}").json()["status"] == "todo"


def test_batch_update_invalid_status(client, make_task):
    a = make_task("A")
    response = client.put("/tasks/batch-update", json={"todos": [{"id": a["id"], "status": "doing"}]})
    assert response.status_code == 422
