from locust import HttpUser, task, between
import random
import uuid


class ReviewerServiceUser(HttpUser):
    wait_time = between(0.2, 1.5)

    def on_start(self):
        """Every simulated client works inside its own team"""
        self.team_name = f"team_{self._uid()}"
        self.user_ids = [f"u_{self._uid()}" for _ in range(6)]

        self.client.post("/team/add", json={
            "team_name": self.team_name,
            "members": [
                {"user_id": uid, "username": f"Load {uid}", "is_active": True}
                for uid in self.user_ids
            ]
        })

        # pr_id -> assigned reviewers
        self.open_prs = {}
        for n in range(3):
            self._create_pr(f"Warmup {n}")

    def _uid(self):
        return uuid.uuid4().hex[:8]

    def _create_pr(self, name):
        pr_id = f"pr_{self._uid()}"
        response = self.client.post("/pullRequest/create", json={
            "pull_request_id": pr_id,
            "pull_request_name": name,
            "author_id": random.choice(self.user_ids)
        })
        if response.status_code == 201:
            self.open_prs[pr_id] = response.json()["pr"]["assigned_reviewers"]

    @task(3)
    def team_page(self):
        self.client.get(f"/team/get?team_name={self.team_name}")

    @task(2)
    def review_queue(self):
        user_id = random.choice(self.user_ids)
        with self.client.get(f"/users/getReview?user_id={user_id}",
                             name="/users/getReview", catch_response=True) as response:
            if response.status_code == 404:
                response.success()

    @task(2)
    def open_pr(self):
        self._create_pr("New PR")

    @task(1)
    def reassign_reviewer(self):
        candidates = [(pr_id, reviewers) for pr_id, reviewers in self.open_prs.items() if reviewers]
        if not candidates:
            return
        pr_id, reviewers = random.choice(candidates)
        with self.client.post("/pullRequest/reassign", json={
            "pull_request_id": pr_id,
            "old_reviewer_id": random.choice(reviewers)
        }, catch_response=True) as response:
            if response.status_code == 200:
                self.open_prs[pr_id] = response.json()["pr"]["assigned_reviewers"]
            elif response.status_code in (404, 409):
                response.success()

    @task(1)
    def merge_random_pr(self):
        if self.open_prs:
            pr_id = random.choice(list(self.open_prs))
            response = self.client.post("/pullRequest/merge", json={"pull_request_id": pr_id})
            if response.status_code == 200:
                self.open_prs.pop(pr_id, None)

    @task(1)
    def toggle_activity(self):
        with self.client.post("/users/setIsActive", json={
            "user_id": random.choice(self.user_ids),
            "is_active": random.choice([True, False])
        }, catch_response=True) as response:
            if response.status_code == 304:
                response.success()

    @task(1)
    def reviewer_stats(self):
        self.client.get("/statistics/reviewers")

    @task(1)
    def health(self):
        self.client.get("/health")
