from __future__ import annotations

import argparse
import asyncio
import getpass
from typing import Any, Awaitable, Callable, Sequence

from app import PortalFacade
from domain.models import Company, JobPosting, Role, UploadedFile
from domain.services import SubmitOutcome
from infra.config import FileSystemConfigProvider
from infra.interaction import ConsoleNotifier
from infra.runtime import StructuredLogger

_ROLE_CHOICES = [role.value for role in Role]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="job-portal")
    parser.add_argument("--config-dir", default="./config", help="Path to config folder")
    sub = parser.add_subparsers(dest="command", required=True)

    login_p = sub.add_parser("login", help="Sign in")
    login_p.add_argument("--email", required=True)
    login_p.add_argument("--role", choices=_ROLE_CHOICES, required=True)
    login_p.add_argument("--password", help="Prompted for when omitted")

    signup_p = sub.add_parser("signup", help="Create an account")
    signup_p.add_argument("--fullname", required=True)
    signup_p.add_argument("--email", required=True)
    signup_p.add_argument("--phone", required=True)
    signup_p.add_argument("--role", choices=_ROLE_CHOICES, required=True)
    signup_p.add_argument("--password", help="Prompted for when omitted")
    signup_p.add_argument("--photo", help="Profile photo image file")

    sub.add_parser("logout", help="Sign out")
    sub.add_parser("whoami", help="Show the signed-in user")

    profile_p = sub.add_parser("update-profile", help="Update the candidate profile")
    profile_p.add_argument("--fullname")
    profile_p.add_argument("--email")
    profile_p.add_argument("--phone")
    profile_p.add_argument("--bio")
    profile_p.add_argument("--skills", help="Comma-separated list")
    profile_p.add_argument("--resume", help="Resume PDF file")

    jobs_p = sub.add_parser("jobs", help="Browse jobs")
    jobs_p.add_argument("--query", default="")

    job_p = sub.add_parser("job", help="Show one job")
    job_p.add_argument("job_id")

    apply_p = sub.add_parser("apply", help="Apply to a job")
    apply_p.add_argument("job_id")

    sub.add_parser("applied", help="List jobs applied to")

    companies_p = sub.add_parser("companies", help="List registered companies")
    companies_p.add_argument("--filter", default="")

    create_p = sub.add_parser("create-company", help="Register a company")
    create_p.add_argument("name")

    setup_p = sub.add_parser("setup-company", help="Update company information")
    setup_p.add_argument("company_id")
    setup_p.add_argument("--name")
    setup_p.add_argument("--description")
    setup_p.add_argument("--website")
    setup_p.add_argument("--location")
    setup_p.add_argument("--logo", help="Logo image file")

    post_p = sub.add_parser("post-job", help="Post a new job")
    post_p.add_argument("--title", required=True)
    post_p.add_argument("--description", required=True)
    post_p.add_argument("--requirements", required=True, help="Comma-separated list")
    post_p.add_argument("--salary", required=True)
    post_p.add_argument("--location", required=True)
    post_p.add_argument("--job-type", required=True)
    post_p.add_argument("--experience", required=True)
    post_p.add_argument("--position", required=True)
    post_p.add_argument("--company-id", required=True)

    admin_jobs_p = sub.add_parser("admin-jobs", help="List jobs posted by the admin")
    admin_jobs_p.add_argument("--filter", default="")

    open_p = sub.add_parser("open", help="Print the screen a path resolves to")
    open_p.add_argument("path")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    config_provider = FileSystemConfigProvider(args.config_dir)
    errors = config_provider.validate()
    if errors:
        print("Config validation failed:")
        for err in errors:
            print(f"  - {err}")
        return 1

    facade = PortalFacade.build(
        config_provider.get_config(),
        notifier=ConsoleNotifier(),
        logger=StructuredLogger(),
    )
    try:
        facade.start()
        return asyncio.run(_COMMANDS[args.command](facade, args))
    finally:
        facade.close()


# -- command handlers -------------------------------------------------------


async def _login(facade: PortalFacade, args: argparse.Namespace) -> int:
    outcome = await facade.submit_form(
        "login",
        {
            "email": args.email,
            "password": args.password if args.password is not None else getpass.getpass(),
            "role": args.role,
        },
    )
    return _report(outcome)


async def _signup(facade: PortalFacade, args: argparse.Namespace) -> int:
    values: dict[str, Any] = {
        "fullname": args.fullname,
        "email": args.email,
        "phoneNumber": args.phone,
        "password": args.password if args.password is not None else getpass.getpass(),
        "role": args.role,
    }
    if args.photo:
        values["file"] = UploadedFile.from_path(args.photo)
    return _report(await facade.submit_form("signup", values))


async def _logout(facade: PortalFacade, args: argparse.Namespace) -> int:
    return 0 if await facade.logout() else 1


async def _whoami(facade: PortalFacade, args: argparse.Namespace) -> int:
    user = facade.identity
    if user is None:
        print("Not signed in")
        return 1
    print(f"{user.fullname} <{user.email}> | {user.role.value} | {user.id}")
    return 0


async def _update_profile(facade: PortalFacade, args: argparse.Namespace) -> int:
    if not await _require_screen(facade, "/profile"):
        return 1
    user = facade.identity
    if user is None:
        print("Not signed in")
        return 1
    values: dict[str, Any] = {
        "fullname": _pick(args.fullname, user.fullname),
        "email": _pick(args.email, user.email),
        "phoneNumber": _pick(args.phone, user.phone_number),
        "bio": _pick(args.bio, user.profile.bio),
        "skills": _pick(args.skills, ",".join(user.profile.skills)),
    }
    if args.resume:
        values["file"] = UploadedFile.from_path(args.resume)
    return _report(await facade.submit_form("profile_update", values))


async def _jobs(facade: PortalFacade, args: argparse.Namespace) -> int:
    await facade.open_screen(facade.search(args.query))
    for job in facade.caches.jobs:
        _print_job(job)
    return 0


async def _job(facade: PortalFacade, args: argparse.Namespace) -> int:
    await facade.open_screen(f"/description/{args.job_id}")
    job = facade.caches.single_job
    if job is None:
        print(f"Job {args.job_id} not found")
        return 1
    _print_job(job)
    if job.description:
        print(job.description)
    if job.requirements:
        print(f"Requirements: {', '.join(job.requirements)}")
    return 0


async def _apply(facade: PortalFacade, args: argparse.Namespace) -> int:
    await facade.open_screen(f"/description/{args.job_id}")
    return 0 if await facade.apply_to_job(args.job_id) else 1


async def _applied(facade: PortalFacade, args: argparse.Namespace) -> int:
    if not await _require_screen(facade, "/profile"):
        return 1
    for application in facade.caches.applied_jobs:
        job = application.job
        title = job.title if job is not None else "-"
        company = job.company.name if job is not None and job.company is not None else "-"
        print(f"{title} | {company} | {application.status}")
    return 0


async def _companies(facade: PortalFacade, args: argparse.Namespace) -> int:
    if not await _require_screen(facade, "/admin/companies"):
        return 1
    facade.caches.set_company_filter(args.filter)
    for company in facade.caches.filtered_companies():
        _print_company(company)
    return 0


async def _create_company(facade: PortalFacade, args: argparse.Namespace) -> int:
    if not await _require_screen(facade, "/admin/companies/create"):
        return 1
    return _report(await facade.submit_form("company_create", {"companyName": args.name}))


async def _setup_company(facade: PortalFacade, args: argparse.Namespace) -> int:
    if not await _require_screen(facade, f"/admin/companies/{args.company_id}"):
        return 1
    current = facade.caches.single_company
    values: dict[str, Any] = {
        "name": _pick(args.name, current.name if current else None),
        "description": _pick(args.description, current.description if current else None),
        "website": _pick(args.website, current.website if current else None),
        "location": _pick(args.location, current.location if current else None),
    }
    if args.logo:
        values["file"] = UploadedFile.from_path(args.logo)
    outcome = await facade.submit_form(
        "company_setup",
        values,
        path_params={"id": args.company_id},
    )
    return _report(outcome)


async def _post_job(facade: PortalFacade, args: argparse.Namespace) -> int:
    if not await _require_screen(facade, "/admin/jobs/create"):
        return 1
    outcome = await facade.submit_form(
        "post_job",
        {
            "title": args.title,
            "description": args.description,
            "requirements": args.requirements,
            "salary": args.salary,
            "location": args.location,
            "jobType": args.job_type,
            "experience": args.experience,
            "position": args.position,
            "companyId": args.company_id,
        },
    )
    return _report(outcome)


async def _admin_jobs(facade: PortalFacade, args: argparse.Namespace) -> int:
    if not await _require_screen(facade, "/admin/jobs"):
        return 1
    facade.caches.set_admin_job_filter(args.filter)
    for job in facade.caches.filtered_admin_jobs():
        _print_job(job)
    return 0


async def _open(facade: PortalFacade, args: argparse.Namespace) -> int:
    print(await facade.open_screen(args.path))
    return 0


_COMMANDS: dict[str, Callable[[PortalFacade, argparse.Namespace], Awaitable[int]]] = {
    "login": _login,
    "signup": _signup,
    "logout": _logout,
    "whoami": _whoami,
    "update-profile": _update_profile,
    "jobs": _jobs,
    "job": _job,
    "apply": _apply,
    "applied": _applied,
    "companies": _companies,
    "create-company": _create_company,
    "setup-company": _setup_company,
    "post-job": _post_job,
    "admin-jobs": _admin_jobs,
    "open": _open,
}


# -- output helpers ---------------------------------------------------------


async def _require_screen(facade: PortalFacade, path: str) -> bool:
    shown = await facade.open_screen(path)
    if shown != path:
        print(f"Not allowed to open {path} (redirected to {shown})")
        return False
    return True


def _report(outcome: SubmitOutcome) -> int:
    if outcome.ok:
        return 0
    for name, message in sorted(getattr(outcome.error, "field_errors", {}).items()):
        print(f"  - {name}: {message}")
    return 1


def _pick(value: str | None, fallback: str | None) -> str:
    return value if value is not None else (fallback or "")


def _print_job(job: JobPosting) -> None:
    company = job.company.name if job.company is not None else job.company_id or "-"
    print(f"{job.id} | {job.title} | {company} | {job.location or '-'} | {job.salary or '-'}")


def _print_company(company: Company) -> None:
    print(f"{company.id} | {company.name} | {company.location or '-'} | {company.website or '-'}")


if __name__ == "__main__":
    raise SystemExit(main())
