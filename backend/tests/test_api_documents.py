DOCUMENT = {
    "id": "doc1",
    "title": "Onboarding",
    "questions": [
        {
            "id": "q1",
            "title": "Do you run a business?",
            "options": [{"id": "yes", "label": "Yes"}, {"id": "no", "label": "No"}],
        },
        {
            "id": "q2",
            "title": "Company size",
            "logic": {"showIf": [{"questionId": "q1", "operator": "equals", "value": "yes"}]},
        },
    ],
}


def test_save_document_and_read_rules(client):
    r = client.post("/api/documents", json=DOCUMENT)
    assert r.status_code == 200
    assert r.json() == {"document_id": "doc1", "rules": 1}

    rules = client.get("/api/documents/doc1/rules").json()["rules"]
    assert len(rules) == 1
    assert rules[0]["id"] == "q2_show_0"
    assert rules[0]["label"] == "Mostrar Company size"
    assert rules[0]["nextStepId"] == "q2"


def test_unknown_document_is_404(client):
    assert client.get("/api/documents/nope/rules").status_code == 404
    assert client.put("/api/documents/nope/rules", json={"rules": []}).status_code == 404


def test_put_rules_replaces_question_logic(client):
    client.post("/api/documents", json=DOCUMENT)
    rules = [
        {
            "id": "anything",
            "label": "Renamed by the author",
            "kind": "skip",
            "questionId": "q2",
            "conditions": [{"field": "q1", "operator": "equals", "value": "no"}],
            "nextStepId": "skip",
        },
        {
            "id": "jump",
            "conditions": [{"field": "q1", "operator": "equals", "value": "yes"}],
            "nextStepId": "q2",
        },
    ]
    r = client.put("/api/documents/doc1/rules", json={"rules": rules})
    assert r.status_code == 200
    questions = r.json()["document"]["questions"]
    assert "logic" not in questions[0]
    assert questions[1]["logic"] == {"skipIf": [{"questionId": "q1", "operator": "equals", "value": "no"}]}

    stored = client.get("/api/documents/doc1/rules").json()["rules"]
    assert [rule["id"] for rule in stored] == ["q2_skip_0"]


def test_saved_document_survives_store_reset(client):
    from quiz_flow.services import documents

    client.post("/api/documents", json=DOCUMENT)
    documents._document_store.clear()

    doc = documents.get_document("doc1")
    assert doc is not None
    assert doc.get_question("q2").logic.show_if[0].value == "yes"


def test_document_with_between_in_legacy_logic_is_rejected(client):
    bad = {
        "id": "doc2",
        "questions": [
            {
                "id": "q1",
                "title": "Age",
                "logic": {"showIf": [{"questionId": "age", "operator": "between", "value": 5}]},
            }
        ],
    }
    assert client.post("/api/documents", json=bad).status_code == 422


def test_document_id_cannot_leave_the_data_dir(client, tmp_path):
    r = client.post("/api/documents", json={"id": "../../escaped", "questions": []})
    assert r.status_code == 422
    assert not (tmp_path.parent / "escaped.json").exists()
    assert not any(tmp_path.rglob("escaped.json"))


def test_unsafe_document_id_is_never_read_from_disk(tmp_path):
    from quiz_flow.services import documents

    (tmp_path / "secret.json").write_text("{}", encoding="utf-8")
    assert documents.get_document("../secret") is None


def test_split_and_rules_are_logged(client, caplog):
    client.post("/api/documents", json=DOCUMENT)
    rules = [
        {
            "id": "both",
            "kind": "skip",
            "questionId": "q2",
            "operator": "AND",
            "conditions": [
                {"field": "q1", "operator": "equals", "value": "no"},
                {"field": "q1", "operator": "not_equals", "value": "maybe"},
            ],
            "nextStepId": "skip",
        }
    ]
    with caplog.at_level("WARNING", logger="quiz_flow.services.documents"):
        r = client.put("/api/documents/doc1/rules", json={"rules": rules})
    assert r.status_code == 200
    assert "both" in caplog.text
    assert len(r.json()["document"]["questions"][1]["logic"]["skipIf"]) == 2
