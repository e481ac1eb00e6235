# circle/common/management/commands/seed_dummy.py
from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from circle.common.errors import ConflictError
from circle.friends.apps import get_friendship_service

USERS = [
    ("alice", "alice@example.com"),
    ("bob", "bob@example.com"),
    ("carol", "carol@example.com"),
    ("dave", "dave@example.com"),
    ("erin", "erin@example.com"),
]

# (from, to, accepted?)
REQUESTS = [
    ("alice", "bob", True),
    ("alice", "carol", True),
    ("dave", "alice", False),
    ("bob", "erin", False),
]


class Command(BaseCommand):
    help = "Seed dummy users and friend relationships for local development"

    def add_arguments(self, parser):
        parser.add_argument("--password", default="test1234!")

    def handle(self, *args, **options):
        User = get_user_model()

        created_count = 0
        with transaction.atomic():
            for username, email in USERS:
                user, created = User.objects.get_or_create(
                    email=email, defaults={"username": username}
                )
                if created:
                    # 비번 지정 (get_or_create 는 해싱 안 해줌)
                    user.set_password(options["password"])
                    user.save(update_fields=["password"])
                    created_count += 1

        self.stdout.write(
            self.style.SUCCESS(f"✅ users done (created={created_count})")
        )

        # 친구 관계는 service 를 거쳐야 두 쪽 record 가 같이 바뀌고 알림도 생김
        by_name = {u.username: u for u in User.objects.filter(username__in=[u for u, _ in USERS])}
        service = get_friendship_service()
        for from_name, to_name, accepted in REQUESTS:
            sender, target = by_name[from_name], by_name[to_name]
            try:
                service.send_request(sender.id, target.id)
                if accepted:
                    service.accept_request(target.id, sender.id)
            except ConflictError as e:
                # 이미 seed 된 관계
                self.stdout.write(f"skip {from_name} -> {to_name}: {e.message}")

        self.stdout.write(self.style.SUCCESS("✅ friend relations done"))
