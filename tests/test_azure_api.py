"""Tests for azure_api helper functions (mocked HTTP)."""

import base64
import json
from unittest.mock import MagicMock, patch

import pytest

from az_sub_inventory import azure_api
from az_sub_inventory.azure_api import (
    AzureApiError,
    AzureAuthorizationError,
    billing_scope,
    get_billing_hierarchy,
    get_subscription_details,
    get_tenant_name,
    list_billing_accounts,
    list_billing_role_assignments,
    list_classic_administrators,
    list_role_assignments,
    list_subscriptions,
    load_cli_profile,
)


def _resp(payload: dict | None = None, status_code: int = 200) -> MagicMock:
    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.json.return_value = payload if payload is not None else {}
    resp.text = ""
    resp.reason = ""
    return resp


# ---------------------------------------------------------------------------
# Requests & pagination
# ---------------------------------------------------------------------------


class TestPaginate:
    def test_follows_next_link(self) -> None:
        pages = [
            _resp({"value": [{"a": 1}], "nextLink": "https://next"}),
            _resp({"value": [{"a": 2}]}),
        ]
        with patch("az_sub_inventory.azure_api.requests.get", side_effect=pages) as get:
            items = azure_api._paginate("https://first", {})
        assert items == [{"a": 1}, {"a": 2}]
        assert get.call_args_list[1][0][0] == "https://next"

    def test_uses_configured_timeout(self) -> None:
        azure_api.configure(timeout=7)
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp({})) as get:
            azure_api._paginate("https://first", {})
        assert get.call_args.kwargs["timeout"] == 7

    def test_403_raises_authorization_error(self) -> None:
        denied = _resp({"error": {"code": "AuthorizationFailed", "message": "no access"}}, 403)
        with (
            patch("az_sub_inventory.azure_api.requests.get", return_value=denied),
            pytest.raises(AzureAuthorizationError) as exc_info,
        ):
            azure_api._get_json("https://x", {})
        assert exc_info.value.status_code == 403
        assert "no access" in str(exc_info.value)

    def test_500_raises_api_error(self) -> None:
        with (
            patch("az_sub_inventory.azure_api.requests.get", return_value=_resp({}, 500)),
            pytest.raises(AzureApiError) as exc_info,
        ):
            azure_api._get_json("https://x", {})
        assert not isinstance(exc_info.value, AzureAuthorizationError)
        assert exc_info.value.url == "https://x"

    def test_no_retry_on_failure(self) -> None:
        with (
            patch("az_sub_inventory.azure_api.requests.get", return_value=_resp({}, 429)) as get,
            pytest.raises(AzureApiError),
        ):
            azure_api._get_json("https://x", {})
        assert get.call_count == 1


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------


class TestDiscovery:
    def test_list_subscriptions_keeps_all_states_and_order(self) -> None:
        payload = {
            "value": [
                {
                    "subscriptionId": "s2",
                    "displayName": "Zeta",
                    "tenantId": "t1",
                    "state": "Disabled",
                    "authorizationSource": "RoleBased",
                    "subscriptionPolicies": {"quotaId": "MS-AZR-0003P", "spendingLimit": "Off"},
                },
                {"subscriptionId": "s1", "displayName": "Alpha", "state": "PastDue"},
            ]
        }
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp(payload)):
            subs = list_subscriptions()
        assert [s["subscriptionId"] for s in subs] == ["s2", "s1"]
        assert subs[0]["quotaId"] == "MS-AZR-0003P"
        assert subs[0]["spendingLimit"] == "Off"
        assert subs[1]["quotaId"] == ""
        assert subs[1]["state"] == "PastDue"

    def test_subscription_details(self) -> None:
        payload = {
            "subscriptionId": "s1",
            "authorizationSource": "ByPartner",
            "subscriptionPolicies": {"quotaId": "CSP_2015-05-01", "spendingLimit": "Off"},
        }
        with patch(
            "az_sub_inventory.azure_api.requests.get", return_value=_resp(payload)
        ) as get:
            details = get_subscription_details("s1")
        assert details == {
            "quotaId": "CSP_2015-05-01",
            "spendingLimit": "Off",
            "authorizationSource": "ByPartner",
        }
        assert "/subscriptions/s1?api-version=2020-01-01" in get.call_args[0][0]

    def test_subscription_details_denied(self) -> None:
        with (
            patch("az_sub_inventory.azure_api.requests.get", return_value=_resp({}, 403)),
            pytest.raises(AzureAuthorizationError),
        ):
            get_subscription_details("s1")

    def test_tenant_name(self) -> None:
        payload = {
            "value": [
                {"tenantId": "t1", "displayName": "First"},
                {"tenantId": "t2", "displayName": "Second"},
            ]
        }
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp(payload)):
            assert get_tenant_name("t2") == "Second"
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp(payload)):
            assert get_tenant_name() == "First"

    def test_tenant_name_defaults_to_token_tenant(self, _mock_credential) -> None:
        claims = base64.urlsafe_b64encode(json.dumps({"tid": "t2"}).encode()).decode().rstrip("=")
        _mock_credential.get_token.return_value.token = f"header.{claims}.sig"
        payload = {
            "value": [
                {"tenantId": "t1", "displayName": "First"},
                {"tenantId": "t2", "displayName": "Second"},
            ]
        }
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp(payload)):
            assert get_tenant_name() == "Second"

    def test_tenant_name_none_visible(self) -> None:
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp({"value": []})):
            assert get_tenant_name() == ""


# ---------------------------------------------------------------------------
# Authorization
# ---------------------------------------------------------------------------


class TestAuthorization:
    def test_classic_administrators(self) -> None:
        payload = {
            "value": [
                {
                    "properties": {
                        "emailAddress": "alice@example.com",
                        "role": "ServiceAdministrator;AccountAdministrator",
                    }
                },
                {"properties": {"emailAddress": "co@example.com", "role": "CoAdministrator"}},
            ]
        }
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp(payload)):
            admins = list_classic_administrators("s1")
        assert admins == [
            {"role": "ServiceAdministrator;AccountAdministrator", "email": "alice@example.com"},
            {"role": "CoAdministrator", "email": "co@example.com"},
        ]

    def test_role_assignments_with_graph_names(self) -> None:
        owner_def = "/subscriptions/s1/providers/Microsoft.Authorization/roleDefinitions/8e3af657"
        defs = _resp({"value": [{"id": owner_def, "properties": {"roleName": "Owner"}}]})
        assignments = _resp(
            {
                "value": [
                    {
                        "properties": {
                            "roleDefinitionId": owner_def,
                            "principalId": "p1",
                            "principalType": "User",
                        }
                    },
                    {
                        "properties": {
                            "roleDefinitionId": "/providers/x/roleDefinitions/acdd72a7",
                            "principalId": "p2",
                            "principalType": "User",
                        }
                    },
                    {
                        "properties": {
                            "roleDefinitionId": owner_def,
                            "principalId": "p3",
                            "principalType": "ServicePrincipal",
                        }
                    },
                ]
            }
        )
        graph = _resp(
            {"value": [{"id": "p1", "userPrincipalName": "alice@example.com", "mail": "a@ex.com"}]}
        )
        with (
            patch("az_sub_inventory.azure_api.requests.get", side_effect=[defs, assignments]),
            patch("az_sub_inventory.azure_api.requests.post", return_value=graph) as post,
        ):
            result = list_role_assignments("/subscriptions/s1", "Owner")
        assert result == [
            {
                "principalName": "alice@example.com",
                "principalEmail": "a@ex.com",
                "principalType": "User",
                "roleDefinitionName": "Owner",
            },
            {
                "principalName": "p3",
                "principalEmail": "",
                "principalType": "ServicePrincipal",
                "roleDefinitionName": "Owner",
            },
        ]
        assert post.call_args.kwargs["json"] == {"ids": ["p1", "p3"]}

    def test_role_assignments_graph_failure_falls_back_to_ids(self) -> None:
        owner_def = "/providers/Microsoft.Authorization/roleDefinitions/8e3af657"
        defs = _resp({"value": [{"id": owner_def, "properties": {"roleName": "Owner"}}]})
        assignments = _resp(
            {"value": [{"properties": {"roleDefinitionId": owner_def, "principalId": "p1"}}]}
        )
        with (
            patch("az_sub_inventory.azure_api.requests.get", side_effect=[defs, assignments]),
            patch("az_sub_inventory.azure_api.requests.post", return_value=_resp({}, 403)),
        ):
            result = list_role_assignments("/subscriptions/s1")
        assert result[0]["principalName"] == "p1"

    def test_role_assignments_unknown_role(self) -> None:
        with patch(
            "az_sub_inventory.azure_api.requests.get", return_value=_resp({"value": []})
        ) as get:
            assert list_role_assignments("/subscriptions/s1", "Owner") == []
        assert get.call_count == 1


# ---------------------------------------------------------------------------
# Billing
# ---------------------------------------------------------------------------


class TestBilling:
    def test_billing_accounts_expose_agreement_type(self) -> None:
        payload = {
            "value": [{"name": "acct", "properties": {"agreementType": "MicrosoftCustomerAgreement"}}]
        }
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp(payload)):
            accounts = list_billing_accounts()
        assert accounts[0]["agreementType"] == "MicrosoftCustomerAgreement"
        assert accounts[0]["name"] == "acct"

    def test_billing_hierarchy(self) -> None:
        payload = {
            "properties": {
                "billingAccountId": "/providers/Microsoft.Billing/billingAccounts/acct:1_2019",
                "billingProfileId": "/providers/Microsoft.Billing/billingAccounts/acct:1_2019"
                "/billingProfiles/PROF",
                "invoiceSectionId": "/providers/Microsoft.Billing/billingAccounts/acct:1_2019"
                "/billingProfiles/PROF/invoiceSections/INV",
                "billingAccountAgreementType": "MicrosoftCustomerAgreement",
                "billingAccountType": "Enterprise",
            }
        }
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp(payload)):
            hierarchy = get_billing_hierarchy("s1")
        assert hierarchy == {
            "billingAccountId": "acct:1_2019",
            "billingProfileId": "PROF",
            "invoiceSectionId": "INV",
            "agreementType": "MicrosoftCustomerAgreement",
            "accountType": "Enterprise",
        }

    def test_billing_hierarchy_empty(self) -> None:
        with patch("az_sub_inventory.azure_api.requests.get", return_value=_resp({})):
            hierarchy = get_billing_hierarchy("s1")
        assert billing_scope(hierarchy) is None

    def test_billing_scope_narrowing(self) -> None:
        base = "/providers/Microsoft.Billing/billingAccounts/a"
        assert billing_scope({"billingAccountId": "a"}) == base
        assert (
            billing_scope({"billingAccountId": "a", "billingProfileId": "p"})
            == f"{base}/billingProfiles/p"
        )
        assert (
            billing_scope({"billingAccountId": "a", "billingProfileId": "p", "invoiceSectionId": "i"})
            == f"{base}/billingProfiles/p/invoiceSections/i"
        )
        # An invoice section without its profile cannot be addressed.
        assert billing_scope({"billingAccountId": "a", "invoiceSectionId": "i"}) == base
        assert billing_scope({"billingProfileId": "p"}) is None

    def test_billing_role_assignments(self) -> None:
        scope = "/providers/Microsoft.Billing/billingAccounts/a/billingProfiles/p"
        defs = _resp(
            {
                "value": [
                    {
                        "id": f"{scope}/billingRoleDefinitions/40000000-aaaa",
                        "properties": {"roleName": "Owner"},
                    },
                    {
                        "id": f"{scope}/billingRoleDefinitions/40000000-bbbb",
                        "properties": {"roleName": "Reader"},
                    },
                ]
            }
        )
        assignments = _resp(
            {
                "value": [
                    {
                        "properties": {
                            "roleDefinitionId": f"{scope}/billingRoleDefinitions/40000000-bbbb",
                            "userEmailAddress": "reader@example.com",
                        }
                    },
                    {
                        "properties": {
                            "roleDefinitionId": f"{scope}/billingRoleDefinitions/40000000-AAAA",
                            "userEmailAddress": "bob@example.com",
                            "principalUserPrincipalName": "bob@contoso.onmicrosoft.com",
                        }
                    },
                ]
            }
        )
        with patch("az_sub_inventory.azure_api.requests.get", side_effect=[defs, assignments]):
            result = list_billing_role_assignments(scope, "Owner")
        assert result == [
            {
                "principalName": "bob@contoso.onmicrosoft.com",
                "principalEmail": "bob@example.com",
                "roleDefinitionName": "Owner",
            }
        ]


# ---------------------------------------------------------------------------
# CLI profile
# ---------------------------------------------------------------------------


class TestCliProfile:
    def test_reads_bom_encoded_profile(self, tmp_path) -> None:
        path = tmp_path / "azureProfile.json"
        data = {
            "subscriptions": [
                {"id": "s1", "isDefault": True, "offerType": None},
                {"id": "s2", "isDefault": False, "offerType": "Pay-As-You-Go"},
            ]
        }
        path.write_text(json.dumps(data), encoding="utf-8-sig")
        profile = load_cli_profile(path)
        assert profile == {
            "s1": {"isDefault": True, "offerType": ""},
            "s2": {"isDefault": False, "offerType": "Pay-As-You-Go"},
        }

    def test_missing_profile(self, tmp_path) -> None:
        assert load_cli_profile(tmp_path / "nope.json") == {}

    def test_corrupt_profile(self, tmp_path) -> None:
        path = tmp_path / "azureProfile.json"
        path.write_text("{not json", encoding="utf-8")
        assert load_cli_profile(path) == {}

    def test_config_dir_env(self, tmp_path, monkeypatch) -> None:
        (tmp_path / "azureProfile.json").write_text(
            json.dumps({"subscriptions": [{"id": "s9", "isDefault": True}]}), encoding="utf-8"
        )
        monkeypatch.setenv("AZURE_CONFIG_DIR", str(tmp_path))
        assert load_cli_profile()["s9"]["isDefault"] is True

    @pytest.mark.parametrize(
        "payload",
        [
            {"subscriptions": None},
            {"subscriptions": ["x", None, 3]},
            {"subscriptions": {"id": "s1"}},
            ["not", "a", "profile"],
            None,
        ],
    )
    def test_unexpected_shapes_give_empty_profile(self, tmp_path, payload) -> None:
        path = tmp_path / "azureProfile.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        assert load_cli_profile(path) == {}

    def test_skips_non_dict_entries(self, tmp_path) -> None:
        path = tmp_path / "azureProfile.json"
        path.write_text(
            json.dumps({"subscriptions": ["x", {"id": "s1", "isDefault": True}]}),
            encoding="utf-8",
        )
        assert load_cli_profile(path) == {"s1": {"isDefault": True, "offerType": ""}}
