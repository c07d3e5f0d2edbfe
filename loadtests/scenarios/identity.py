"""Identity load test scenarios.

Stateful SequentialTaskSet journeys covering customer registration, the
address book and the contact form. Steps execute in order; each depends
on the previous step succeeding.
"""

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import address_data, contact_data, customer_data, shopper_headers, valid_phone
from loadtests.helpers.response import extract_error_detail


class NewCustomerJourney(SequentialTaskSet):
    """Register -> Update Profile -> Add Addresses (x2) -> Switch Default -> Remove First."""

    def on_start(self):
        self.headers = shopper_headers()
        self.address_ids = []

    @task
    def register(self):
        with self.client.post(
            "/customers",
            json=customer_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /customers",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Registration failed: {resp.status_code} | {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def update_profile(self):
        with self.client.put(
            "/customers/me",
            json={"phone": valid_phone()},
            headers=self.headers,
            catch_response=True,
            name="PUT /customers/me",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Update profile failed: {resp.status_code} | {extract_error_detail(resp)}")

    def _add_address(self):
        with self.client.post(
            "/customers/me/addresses",
            json=address_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /customers/me/addresses",
        ) as resp:
            if resp.status_code == 201:
                self.address_ids.append(resp.json()["data"]["id"])
            else:
                resp.failure(f"Add address failed: {resp.status_code} | {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def add_first_address(self):
        self._add_address()

    @task
    def add_second_address(self):
        self._add_address()

    @task
    def switch_default(self):
        with self.client.put(
            f"/customers/me/addresses/{self.address_ids[-1]}/default",
            headers=self.headers,
            catch_response=True,
            name="PUT /customers/me/addresses/{id}/default",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Set default failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def remove_first_address(self):
        with self.client.delete(
            f"/customers/me/addresses/{self.address_ids[0]}",
            headers=self.headers,
            catch_response=True,
            name="DELETE /customers/me/addresses/{id}",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Remove address failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class ContactJourney(SequentialTaskSet):
    """Submit a contact message as an authenticated visitor."""

    def on_start(self):
        self.headers = shopper_headers()

    @task
    def submit(self):
        with self.client.post(
            "/contact",
            json=contact_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /contact",
        ) as resp:
            if resp.status_code == 429:
                # The contact form is on the critical rate limit.
                resp.success()
            elif resp.status_code != 201:
                resp.failure(f"Contact failed: {resp.status_code} | {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class IdentityUser(HttpUser):
    """Locust user simulating account management.

    Weighted distribution:
    - 80% New Customer Journey
    - 20% Contact Journey
    """

    weight = 2
    wait_time = between(0.5, 2.0)
    tasks = {
        NewCustomerJourney: 4,
        ContactJourney: 1,
    }
