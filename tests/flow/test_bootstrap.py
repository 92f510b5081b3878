import asyncio

from wizard.flow.bootstrap import bootstrap
from wizard.flow.host import MemoryHost


def test_starts_on_first_step_without_touching_url(services):
    host = MemoryHost(location="http://localhost:3000/")
    controller = asyncio.run(bootstrap(host, services))
    assert controller.state.currentStepId == "intro"
    assert controller.state.isPaid is False
    assert host.location == "http://localhost:3000/"
    assert host.view.find("h1").text == "Intro"


def test_restores_step_and_paid_flag_from_url(services):
    host = MemoryHost(location="http://localhost:3000/?paid=1&step=inputs&session_id=cs_1")
    controller = asyncio.run(bootstrap(host, services))
    assert controller.state.currentStepId == "inputs"
    assert controller.state.isPaid is True
    assert host.view.find("h1").text == "Your Inputs"


def test_paid_must_be_exactly_one(services):
    host = MemoryHost(location="http://localhost:3000/?paid=true")
    controller = asyncio.run(bootstrap(host, services))
    assert controller.state.isPaid is False


def test_unknown_step_in_url_renders_blank(services):
    host = MemoryHost(location="http://localhost:3000/?step=ghost")
    controller = asyncio.run(bootstrap(host, services))
    assert controller.state.currentStepId == "ghost"
    assert host.view is None


def test_config_failure_leaves_blank_view(services):
    services.fail_config = True
    host = MemoryHost(location="http://localhost:3000/?step=inputs")
    assert asyncio.run(bootstrap(host, services)) is None
    assert host.view is None


def test_navigation_round_trips_through_the_url(services):
    host = MemoryHost(location="http://localhost:3000/")
    controller = asyncio.run(bootstrap(host, services))
    controller.navigate("results")
    rendered = host.view.to_html()

    reloaded = MemoryHost(location=host.location)
    asyncio.run(bootstrap(reloaded, services))
    assert reloaded.view.to_html() == rendered


def test_full_scenario(services):
    host = MemoryHost(location="http://localhost:3000/")
    controller = asyncio.run(bootstrap(host, services))

    asyncio.run(host.view.find_button("Continue").click())
    assert controller.state.currentStepId == "inputs"

    form_view = host.view
    asyncio.run(form_view.find_button("Get My Verdict").click())
    assert form_view.find(className="helper").text == "This field is required."
    assert controller.state.currentStepId == "inputs"

    form_view.find_by_attr("name", "spend").value = "5000"
    asyncio.run(form_view.find_button("Get My Verdict").click())

    assert controller.state.data == {"spend": "5000"}
    assert services.verdict_requests == [{"spend": "5000"}]
    assert controller.state.currentStepId == "results"
    assert host.view.find(className="verdict").text == "The verdict."
    assert host.location == "http://localhost:3000/?step=results"
