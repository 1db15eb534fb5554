import asyncio

from cineweb.gateway.base import ApiError, NetworkError, Resource
from cineweb.pages import MoviesPage, RoomsPage, SessionsPage, TicketsPage
from cineweb.schemas import MovieField, RoomField, SessionField, TicketField
from cineweb.views import MOVIE_NOT_FOUND, ROOM_NOT_FOUND


def seed_catalog(gateway):
    movie = gateway.seed(Resource.MOVIES, titulo="Dune", sinopse="Sci-fi epic", duracao=155)
    room = gateway.seed(Resource.ROOMS, numero=5, capacidade=100)
    session = gateway.seed(Resource.SESSIONS, id="s1", filmeId=movie.id, salaId=room.id, dataHora="2099-01-12T19:30")
    return movie, room, session


class TestMoviesPage:
    def test_submit_dune_refreshes_list(self, gateway):
        page = MoviesPage(gateway)
        page.form.set_field(MovieField.TITLE, "Dune")
        page.form.set_field(MovieField.SYNOPSIS, "Sci-fi epic")
        page.form.set_field(MovieField.DURATION, 155)

        movie = asyncio.run(page.form.submit())

        assert movie is not None
        assert page.form.draft == page.form.initial_draft
        assert [m.title for m in page.movies] == ["Dune"]
        assert gateway.calls == [("create", Resource.MOVIES), ("list", Resource.MOVIES)]
        assert "Dune" in page.render()

    def test_delete_then_refetch(self, gateway):
        movie = gateway.seed(Resource.MOVIES, titulo="Dune", sinopse="Sci-fi epic", duracao=155)
        page = MoviesPage(gateway)
        asyncio.run(page.load())

        assert asyncio.run(page.delete_movie(movie.id))

        assert page.movies == []
        assert gateway.calls[-2:] == [("delete", Resource.MOVIES), ("list", Resource.MOVIES)]

    def test_deleting_missing_movie_surfaces_server_error(self, gateway):
        gateway.seed(Resource.MOVIES, titulo="Dune", sinopse="Sci-fi epic", duracao=155)
        page = MoviesPage(gateway)
        asyncio.run(page.load())
        before = list(page.movies)

        assert not asyncio.run(page.delete_movie("999"))

        assert isinstance(page.last_failure, ApiError)
        assert page.last_failure.status_code == 404
        assert page.movies == before
        assert gateway.calls[-1] == ("list", Resource.MOVIES)

    def test_declined_confirmation_deletes_nothing(self, gateway):
        movie = gateway.seed(Resource.MOVIES, titulo="Dune", sinopse="Sci-fi epic", duracao=155)
        asked = []
        page = MoviesPage(gateway, confirm=lambda message: asked.append(message) or False)

        assert not asyncio.run(page.delete_movie(movie.id))

        assert asked == ["Are you sure you want to delete this movie?"]
        assert gateway.operations("delete") == []

    def test_missing_id_is_a_no_op(self, gateway):
        page = MoviesPage(gateway)
        assert not asyncio.run(page.delete_movie(None))
        assert gateway.calls == []

    def test_failed_load_keeps_previous_list(self, gateway):
        gateway.seed(Resource.MOVIES, titulo="Dune", sinopse="Sci-fi epic", duracao=155)
        page = MoviesPage(gateway)
        assert asyncio.run(page.load())

        gateway.fail("list", Resource.MOVIES, NetworkError("refused"))
        assert not asyncio.run(page.load())

        assert [m.title for m in page.movies] == ["Dune"]
        assert isinstance(page.load_failure, NetworkError)


class TestRoomsPage:
    def test_create_then_list_round_trip(self, gateway):
        page = RoomsPage(gateway)
        page.form.set_field(RoomField.NUMBER, 5)
        page.form.set_field(RoomField.CAPACITY, 100)

        asyncio.run(page.form.submit())
        listed = asyncio.run(gateway.get_rooms())

        assert any(r.number == 5 and r.capacity == 100 and r.id for r in listed)
        assert [(r.number, r.capacity) for r in page.rooms] == [(5, 100)]


class TestSessionsPage:
    def test_load_resolves_references(self, gateway):
        seed_catalog(gateway)
        gateway.seed(Resource.SESSIONS, id="s2", filmeId="gone", salaId="gone", dataHora="2099-01-13T10:00")
        page = SessionsPage(gateway)

        assert asyncio.run(page.load())

        rows = page.table().to_dict("records")
        assert rows[0]["movie"] == "Dune"
        assert rows[0]["room"] == "Room 5"
        assert rows[0]["starts_at"] == "12/01/2099 19:30"
        assert rows[1]["movie"] == MOVIE_NOT_FOUND
        assert rows[1]["room"] == ROOM_NOT_FOUND

    def test_load_is_all_or_nothing(self, gateway):
        seed_catalog(gateway)
        page = SessionsPage(gateway)
        gateway.fail("list", Resource.ROOMS, ApiError(500))

        assert not asyncio.run(page.load())

        assert page.movies == [] and page.rooms == [] and page.sessions == []

    def test_several_failed_lists_report_the_first(self, gateway):
        seed_catalog(gateway)
        page = SessionsPage(gateway)
        gateway.fail("list", Resource.MOVIES, NetworkError("refused"))
        gateway.fail("list", Resource.SESSIONS, ApiError(500))

        assert not asyncio.run(page.load())

        assert str(page.load_failure) == "refused"
        assert sorted(gateway.operations("list")) == sorted([Resource.MOVIES, Resource.ROOMS, Resource.SESSIONS])
        assert page.rooms == []

    def test_schedule_session_refreshes(self, gateway):
        movie, room, _ = seed_catalog(gateway)
        page = SessionsPage(gateway)
        page.form.set_field(SessionField.MOVIE_ID, movie.id)
        page.form.set_field(SessionField.ROOM_ID, room.id)
        page.form.set_field(SessionField.STARTS_AT, "2099-02-01T21:00")

        assert asyncio.run(page.form.submit()) is not None

        assert len(page.sessions) == 2

    def test_sell_ticket_from_selected_session(self, gateway, notes):
        seed_catalog(gateway)
        page = SessionsPage(gateway, notify=notes.append)
        asyncio.run(page.load())

        assert page.open_sale("s1")
        assert page.sale_summary() == "Movie: Dune\nRoom: 5\nDate/time: 12/01/2099 19:30"
        page.sale.set_field(TicketField.TYPE, "MEIA")
        page.sale.set_field(TicketField.PRICE, 20)
        ticket = asyncio.run(page.sale.submit())

        assert ticket.session_id == "s1"
        assert not page.sale.is_open
        assert page.sale_summary() == ""

    def test_open_sale_for_unknown_session(self, gateway, notes):
        page = SessionsPage(gateway, notify=notes.append)
        assert not page.open_sale("nope")
        assert notes == ["Session nope not found."]


class TestTicketsPage:
    def test_tickets_labelled_with_session(self, gateway):
        _, _, session = seed_catalog(gateway)
        gateway.seed(Resource.TICKETS, sessaoId=session.id, tipo="INTEIRA", valor=40)
        gateway.seed(Resource.TICKETS, sessaoId="gone", tipo="MEIA", valor=20)
        page = TicketsPage(gateway)

        assert asyncio.run(page.load())

        rows = page.table().to_dict("records")
        assert rows[0]["session"] == "Dune | Room 5 | 12/01/2099 19:30"
        assert rows[0]["type"] == "INTEIRA"
        assert rows[0]["price"] == "40.00"
        assert rows[1]["session"] == "Session not found"

    def test_empty_render(self, gateway):
        page = TicketsPage(gateway)
        asyncio.run(page.load())
        assert page.render() == "No tickets sold."
