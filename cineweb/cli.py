#!/usr/bin/env python3
"""
CineWeb command line front end.

Usage:
    cineweb movies list
    cineweb movies add --title "Dune" --synopsis "Sci-fi epic" --duration 155
    cineweb movies delete 3 --yes
    cineweb rooms add --number 5 --capacity 100
    cineweb sessions add --movie-id 1 --room-id 2 --datetime 2026-11-02T19:30
    cineweb tickets sell --session-id s1 --type MEIA --price 20
    cineweb export sessions --output sessions.csv
"""

import argparse
import asyncio
import sys

from cineweb import config
from cineweb.api_client import CinemaApiClient
from cineweb.forms import FormController
from cineweb.models import TicketType
from cineweb.pages import MoviesPage, RoomsPage, SessionsPage, TicketsPage
from cineweb.schemas import MovieField, RoomField, SessionField, TicketField

PAGES = {
    "movies": MoviesPage,
    "rooms": RoomsPage,
    "sessions": SessionsPage,
    "tickets": TicketsPage,
}


def _ask(message: str) -> bool:
    return input(f"{message} [y/N] ").strip().lower() in ("y", "yes")


def _print_outcome(form: FormController):
    if form.errors:
        print("❌ Please fix the following fields:")
        for field_id, message in form.errors.items():
            print(f"   {field_id.value}: {message}")
    elif form.state.failure is not None:
        print(f"❌ Request failed: {form.state.failure}")


async def _submit(page, form: FormController) -> int:
    record = await form.submit()
    if record is None:
        _print_outcome(form)
        return 1
    print(f"✅ Created {form.label} {record.id}")
    print(page.render())
    return 0


async def list_page(args, client) -> int:
    page = PAGES[args.entity](client)
    if not await page.load():
        print(f"❌ Could not load {page.kind}: {page.load_failure}")
        return 1
    print(page.render())
    return 0


async def add_movie(args, client) -> int:
    page = MoviesPage(client)
    form = page.form
    form.set_field(MovieField.TITLE, args.title)
    form.set_field(MovieField.SYNOPSIS, args.synopsis)
    form.set_field(MovieField.DURATION, args.duration)
    form.set_field(MovieField.RATING, args.rating)
    form.set_field(MovieField.GENRE, args.genre)
    form.set_field(MovieField.START_DATE, args.start_date)
    form.set_field(MovieField.END_DATE, args.end_date)
    return await _submit(page, form)


async def delete_movie(args, client) -> int:
    page = MoviesPage(client, confirm=(lambda message: True) if args.yes else _ask)
    deleted = await page.delete_movie(args.id)
    if page.last_failure is not None:
        print(f"❌ Could not delete movie {args.id}: {page.last_failure}")
    elif deleted:
        print(f"✅ Deleted movie {args.id}")
    else:
        print("Deletion cancelled.")
        return 1
    print(page.render())
    return 0 if deleted else 1


async def add_room(args, client) -> int:
    page = RoomsPage(client)
    page.form.set_field(RoomField.NUMBER, args.number)
    page.form.set_field(RoomField.CAPACITY, args.capacity)
    return await _submit(page, page.form)


async def add_session(args, client) -> int:
    page = SessionsPage(client)
    page.form.set_field(SessionField.MOVIE_ID, args.movie_id)
    page.form.set_field(SessionField.ROOM_ID, args.room_id)
    page.form.set_field(SessionField.STARTS_AT, args.datetime)
    return await _submit(page, page.form)


async def sell_ticket(args, client) -> int:
    page = SessionsPage(client, notify=print)
    if not await page.load():
        print(f"❌ Could not load sessions: {page.load_failure}")
        return 1
    if not page.open_sale(args.session_id):
        return 1

    print(page.sale_summary())
    page.sale.set_field(TicketField.TYPE, args.type)
    page.sale.set_field(TicketField.PRICE, args.price)
    record = await page.sale.submit()
    if record is None:
        _print_outcome(page.sale)
        return 1
    return 0


async def export_page(args, client) -> int:
    page = PAGES[args.entity](client)
    if not await page.load():
        print(f"❌ Could not load {page.kind}: {page.load_failure}")
        return 1
    path = page.export(args.output)
    print(f"✅ Saved {page.kind} to {path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='CineWeb cinema management front end')
    parser.add_argument('--api-url', type=str, default=None,
                        help=f'Backend base URL (default: {config.API_BASE_URL})')
    parser.add_argument('--verbose', action='store_true', help='Log every request and print client statistics')
    entities = parser.add_subparsers(dest='entity', required=True)

    # movies
    movies = entities.add_parser('movies', help='Movie catalog')
    actions = movies.add_subparsers(dest='action', required=True)
    actions.add_parser('list', help='List movies').set_defaults(handler=list_page)
    add = actions.add_parser('add', help='Register a movie')
    add.add_argument('--title', default='')
    add.add_argument('--synopsis', default='')
    add.add_argument('--duration', default='', help='Minutes')
    add.add_argument('--rating', default='', help='Age rating')
    add.add_argument('--genre', default='')
    add.add_argument('--start-date', default='', help='First exhibition day (YYYY-MM-DD)')
    add.add_argument('--end-date', default='', help='Last exhibition day (YYYY-MM-DD)')
    add.set_defaults(handler=add_movie)
    delete = actions.add_parser('delete', help='Delete a movie')
    delete.add_argument('id')
    delete.add_argument('--yes', action='store_true', help='Do not ask for confirmation')
    delete.set_defaults(handler=delete_movie)

    # rooms
    rooms = entities.add_parser('rooms', help='Exhibition rooms')
    actions = rooms.add_subparsers(dest='action', required=True)
    actions.add_parser('list', help='List rooms').set_defaults(handler=list_page)
    add = actions.add_parser('add', help='Register a room')
    add.add_argument('--number', default='')
    add.add_argument('--capacity', default='')
    add.set_defaults(handler=add_room)

    # sessions
    sessions = entities.add_parser('sessions', help='Screening sessions')
    actions = sessions.add_subparsers(dest='action', required=True)
    actions.add_parser('list', help='List sessions').set_defaults(handler=list_page)
    add = actions.add_parser('add', help='Schedule a session')
    add.add_argument('--movie-id', default='')
    add.add_argument('--room-id', default='')
    add.add_argument('--datetime', default='', help='YYYY-MM-DDTHH:MM')
    add.set_defaults(handler=add_session)

    # tickets
    tickets = entities.add_parser('tickets', help='Ticket sales')
    actions = tickets.add_subparsers(dest='action', required=True)
    actions.add_parser('list', help='List sold tickets').set_defaults(handler=list_page)
    sell = actions.add_parser('sell', help='Sell a ticket for a session')
    sell.add_argument('--session-id', required=True)
    sell.add_argument('--type', default=TicketType.FULL.value, help='INTEIRA or MEIA')
    sell.add_argument('--price', default='')
    sell.set_defaults(handler=sell_ticket)

    # export (not an entity; handled with the same dispatch)
    export = entities.add_parser('export', help='Save a list as CSV')
    export.add_argument('kind', choices=sorted(PAGES))
    export.add_argument('--output', type=str, default=None, help='CSV path (default: cinema_data/)')
    export.set_defaults(handler=export_page)

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.entity == 'export':
        args.entity = args.kind
    config.setup_logging(args.verbose)

    client = CinemaApiClient(base_url=args.api_url)
    try:
        return asyncio.run(args.handler(args, client))
    finally:
        if args.verbose:
            client.print_stats()
        client.close()


if __name__ == "__main__":
    sys.exit(main())
