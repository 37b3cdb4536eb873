#!/usr/bin/env python3
"""Unified CLI for OnyxFlow.

Usage:
    python cli.py clients --help
    python cli.py projects --help
    python cli.py settings --help
    python cli.py notifications
    python cli.py serve
"""
import argparse
import asyncio
import json
import logging
import os
import sys

from onyxflow.config import load_config
from onyxflow.dashboard import Dashboard, build_dashboard
from onyxflow.errors import OnyxflowError
from onyxflow.models import Client, ClientType, ProjectDraft, ProjectStatus
from onyxflow.prompts import ConsolePrompter, StaticPrompter
from onyxflow.templates import BUILTIN_TEMPLATES, PROJECT_TYPES
from onyxflow.timer import format_duration

STATUS_ICONS = {
    ProjectStatus.NOT_STARTED: "⚪",
    ProjectStatus.IN_PROGRESS: "🔵",
    ProjectStatus.REVIEW: "🟡",
    ProjectStatus.COMPLETED: "✅",
    ProjectStatus.ON_HOLD: "⏸️ ",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='🗂️  OnyxFlow - Client & Project Dashboard',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python cli.py clients list
  python cli.py clients add "Nova Studio" --email hi@nova.io --type Agency
  python cli.py clients delete <id> --yes
  python cli.py projects create "Spring Campaign" --client <id> --type "Brand Identity"
  python cli.py projects status <id> Review
  python cli.py settings set appearance theme light
  python cli.py settings export --dir exports/
  python cli.py serve --port 8000
"""
    )
    parser.add_argument('--config', help='Path to YAML config')
    parser.add_argument('-v', '--verbose', action='store_true', help='Debug logging')
    sub = parser.add_subparsers(dest='module', required=True)

    clients = sub.add_parser('clients', help='Client management')
    clients_sub = clients.add_subparsers(dest='command', required=True)
    c_list = clients_sub.add_parser('list')
    c_list.add_argument('--query', '-q', default='')
    c_add = clients_sub.add_parser('add')
    c_add.add_argument('name')
    c_add.add_argument('--email', default='')
    c_add.add_argument('--company', default='')
    c_add.add_argument('--phone', default='')
    c_add.add_argument('--type', choices=[t.value for t in ClientType], default=ClientType.INDIVIDUAL.value)
    c_delete = clients_sub.add_parser('delete')
    c_delete.add_argument('client_id')
    c_delete.add_argument('--yes', '-y', action='store_true', help='Skip confirmation')

    projects = sub.add_parser('projects', help='Project management')
    projects_sub = projects.add_subparsers(dest='command', required=True)
    p_list = projects_sub.add_parser('list')
    p_list.add_argument('--query', '-q', default='')
    p_list.add_argument('--client', help='Only projects of this client')
    p_create = projects_sub.add_parser('create')
    p_create.add_argument('name')
    p_create.add_argument('--client', required=True, help='Client ID')
    p_create.add_argument('--type', choices=PROJECT_TYPES, default='')
    p_create.add_argument('--template', choices=[t.name for t in BUILTIN_TEMPLATES])
    p_create.add_argument('--tags', nargs='*')
    p_status = projects_sub.add_parser('status')
    p_status.add_argument('project_id')
    p_status.add_argument('status', choices=[s.value for s in ProjectStatus])

    settings = sub.add_parser('settings', help='Dashboard settings')
    settings_sub = settings.add_subparsers(dest='command', required=True)
    settings_sub.add_parser('show')
    s_set = settings_sub.add_parser('set')
    s_set.add_argument('category')
    s_set.add_argument('key')
    s_set.add_argument('value', help='JSON literal or plain string')
    s_reset = settings_sub.add_parser('reset')
    s_reset.add_argument('category', nargs='?', help='Reset one category (default: everything)')
    s_reset.add_argument('--yes', '-y', action='store_true', help='Skip confirmation')
    s_export = settings_sub.add_parser('export')
    s_export.add_argument('--dir', default=None, help='Target directory')
    s_import = settings_sub.add_parser('import')
    s_import.add_argument('file')

    sub.add_parser('notifications', help='Show notifications from this session')

    serve = sub.add_parser('serve', help='Run the REST API')
    serve.add_argument('--host', default='127.0.0.1')
    serve.add_argument('--port', type=int, default=8000)
    return parser


def _parse_value(raw: str):
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


# --- Commands ---


async def cmd_clients(dashboard: Dashboard, args) -> int:
    sync = dashboard.sync
    if args.command == 'list':
        for client in sync.search_clients(args.query):
            count = sync.client_project_count(client.id)
            print(f"  {client.id[:8]}  {client.name:<28} {client.status.value:<9} {count} projects")
        return 0

    if args.command == 'add':
        client = Client(
            name=args.name, email=args.email, company=args.company,
            phone=args.phone, type=ClientType(args.type),
        )
        added = await sync.add_client(client)
        if added is None:
            return 1
        print(f"✅ Client added: {added.name} ({added.id})")
        return 0

    prompter = StaticPrompter(answer=True) if args.yes else None
    if sync.get_client(args.client_id) is None:
        print(f"❌ Unknown client: {args.client_id}")
        return 1
    if not await sync.delete_client(args.client_id, prompter=prompter):
        print("   Nothing deleted.")
        return 1
    print(f"🗑️  Client {args.client_id} deleted")
    return 0


async def cmd_projects(dashboard: Dashboard, args) -> int:
    sync = dashboard.sync
    if args.command == 'list':
        projects = sync.search_projects(args.query)
        if args.client:
            projects = [p for p in projects if p.client_id == args.client]
        for p in projects:
            icon = STATUS_ICONS.get(p.status, "•")
            deadline = p.deadline.isoformat() if p.deadline else "-"
            print(
                f"  {icon} {p.id[:8]}  {p.name:<30} {p.client.name:<20} "
                f"due {deadline}  {format_duration(p.time_spent_seconds)}"
            )
        orphans = sync.orphaned_projects()
        if orphans:
            print(f"\n⚠️  {len(orphans)} project(s) reference unknown clients")
        return 0

    if args.command == 'create':
        draft = ProjectDraft(
            name=args.name, client_id=args.client, type=args.type,
            template=args.template, tags=args.tags,
        )
        try:
            project = await sync.create_project(draft)
        except ValueError as e:
            print(f"❌ {e}")
            return 1
        except OnyxflowError:
            return 1
        print(f"✅ Project created: {project.name} ({project.id}), due {project.deadline}")
        return 0

    status = ProjectStatus(args.status)
    if not await sync.update_project_status(args.project_id, status):
        print(f"❌ Status update failed for {args.project_id}")
        return 1
    print(f"{STATUS_ICONS[status]} {args.project_id} → {status.value}")
    return 0


def cmd_settings(dashboard: Dashboard, args) -> int:
    manager = dashboard.settings
    if args.command == 'show':
        print(manager.export_json())
        return 0

    if args.command == 'set':
        try:
            manager.update(args.category, args.key, _parse_value(args.value))
        except KeyError as e:
            print(f"❌ {e.args[0] if e.args else e}")
            return 1
        except ValueError as e:
            print(f"❌ Invalid value: {e}")
            return 1
        print(f"✓ {args.category}.{args.key} = {manager.get(args.category, args.key)!r}")
        return 0

    if args.command == 'reset':
        if args.category:
            try:
                manager.reset_category(args.category)
            except KeyError as e:
                print(f"❌ {e.args[0] if e.args else e}")
                return 1
            print(f"✓ {args.category} reset")
            return 0
        prompter = StaticPrompter(answer=True) if args.yes else None
        if not manager.reset_all(prompter=prompter):
            print("   Nothing reset.")
            return 1
        print("✓ All settings reset")
        return 0

    if args.command == 'export':
        path = manager.export_settings(args.dir or dashboard.config.settings.export_dir)
        print(f"📄 Exported: {path}")
        return 0

    with open(args.file, encoding='utf-8') as f:
        text = f.read()
    if not manager.import_settings(text):
        print("❌ Invalid settings file")
        return 1
    print("✓ Settings imported")
    return 0


def cmd_notifications(dashboard: Dashboard) -> int:
    items = dashboard.notifications.items
    if not items:
        print("  No notifications.")
        return 0
    for n in items:
        marker = " " if n.read else "●"
        print(f"  {marker} [{n.priority.value:<8}] {n.title}: {n.message}")
    return 0


async def run(args) -> int:
    config = load_config(args.config)
    dashboard = build_dashboard(config, ConsolePrompter())
    needs_data = args.module in ('clients', 'projects')
    try:
        await dashboard.startup(load=needs_data)
        if args.module == 'clients':
            return await cmd_clients(dashboard, args)
        if args.module == 'projects':
            return await cmd_projects(dashboard, args)
        if args.module == 'settings':
            return cmd_settings(dashboard, args)
        return cmd_notifications(dashboard)
    finally:
        await dashboard.shutdown()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else os.environ.get("LOG_LEVEL", "WARNING"),
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.module == 'serve':
        import uvicorn

        uvicorn.run("onyxflow.api:app", host=args.host, port=args.port)
        return 0

    return asyncio.run(run(args))


if __name__ == '__main__':
    sys.exit(main())
