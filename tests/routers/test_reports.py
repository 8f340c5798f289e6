import pytest

from disc_insights.scoring.disc import calculate_disc_results


@pytest.fixture
def user(seed):
    return seed.user(email="user@example.com", full_name="Maria Silva")


def _report_url(result):
    return f"/api/v1/results/{result.id}/report.pdf"


def test_disc_report_download(client, seed, user, auth_headers):
    disc = seed.assessment("disc")
    result = seed.result(user.id, disc.id, calculate_disc_results({1: "D", 2: "D", 3: "I", 4: "C"}))

    response = client.get(_report_url(result), headers=auth_headers(user))

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == (
        "attachment; filename*=UTF-8''DISC_Report_Maria_Silva_2024-05-17.pdf"
    )
    assert response.content.startswith(b"%PDF")


def test_behavior_report_download_with_analysis(client, seed, user, auth_headers):
    behavior = seed.assessment("behavior")
    result = seed.result(
        user.id,
        behavior.id,
        {"traits": {"1": 5, "2": 1}, "frequencies": {"persistente": 5}, "timeStats": {}},
        ai_analysis={"summary": "Resumo do perfil.", "strengths": ["Foco"]},
    )

    response = client.get(_report_url(result), headers=auth_headers(user))

    assert response.status_code == 200
    assert response.headers["content-disposition"].endswith("tracos-comportamentais_maria_silva_2024-05-17.pdf")
    assert response.content.startswith(b"%PDF")


def test_report_for_unsupported_type(client, seed, user, auth_headers):
    hexaco = seed.assessment("hexaco")
    result = seed.result(user.id, hexaco.id, {"scores": {}})

    response = client.get(_report_url(result), headers=auth_headers(user))
    assert response.status_code == 400
    assert response.json()["detail"]["detail"]["code"] == "RPT_001"


def test_report_of_another_user(client, seed, user, auth_headers):
    disc = seed.assessment("disc")
    result = seed.result(user.id, disc.id, calculate_disc_results({1: "S"}))
    intruder = seed.user(email="intruder@example.com")

    response = client.get(_report_url(result), headers=auth_headers(intruder))
    assert response.status_code == 403
