"""Tests for alicloudslim.market"""

import json
import re

import pytest
import requests

from alicloudslim.errors import MarketAPIError
from alicloudslim.market import MarketClient, extract_options
from alicloudslim.models import Product, ProductOption, PricedOption
from alicloudslim.sign import sign_params

ENDPOINT = "https://market.test/"


def client_for(session):
    return MarketClient("test-id", "test-secret", endpoint=ENDPOINT, timeout=5, session=session)


def metering_page(page, size, count, codes):
    return {
        "PageSize": size,
        "PageNumber": page,
        "Count": count,
        "Success": True,
        "Code": "200",
        "Message": "",
        "Version": "2015-11-01",
        "Fatal": False,
        "Result": [
            {
                "ProductName": f"API {code}",
                "AliyunPk": 1234567890,
                "ProductCode": code,
                "TotalQuota": 1000,
                "TotalUsage": 10,
                "Unit": "次",
            }
            for code in codes
        ],
    }


DESCRIBE_PRODUCT = {
    "Code": "cmapi021863",
    "Name": "全国快递物流查询",
    "ShortDescription": "快递查询接口",
    "Type": "APIMP",
    "ProductSkus": {
        "ProductSku": [
            {
                "ChargeType": "PREPAY",
                "Modules": {
                    "Module": [
                        {
                            "Code": "package_version",
                            "Properties": {
                                "Property": [
                                    {
                                        "Key": "package_version",
                                        "PropertyValues": {
                                            "PropertyValue": [
                                                {"Type": "enum", "DisplayName": "100次", "Value": "yuncode1586300001"},
                                                {"Type": "enum", "DisplayName": "1000次", "Value": "yuncode1586300002"},
                                            ]
                                        },
                                    },
                                    {
                                        "Key": "other",
                                        "PropertyValues": {"PropertyValue": [{"DisplayName": "x", "Value": "ignored"}]},
                                    },
                                ]
                            },
                        },
                        {
                            "Code": "region",
                            "Properties": {"Property": [{"Key": "package_version", "PropertyValues": {"PropertyValue": [{"DisplayName": "y", "Value": "ignored"}]}}]},
                        },
                    ]
                },
            },
            {
                "ChargeType": "PREPAY",
                "Modules": {
                    "Module": [
                        {
                            "Code": "package_version",
                            "Properties": {
                                "Property": [
                                    {
                                        "Key": "package_version",
                                        "PropertyValues": {"PropertyValue": [{"DisplayName": "10000次", "Value": "yuncode1586300003"}]},
                                    }
                                ]
                            },
                        }
                    ]
                },
            },
        ]
    },
}


class TestSignedRequest:

    def test_common_parameters(self, session):
        session.queue(DESCRIBE_PRODUCT)
        client_for(session).get_product("cmapi021863")
        call = session.calls[0]
        params = call["params"]
        assert call["url"] == ENDPOINT
        assert call["timeout"] == 5
        assert params["Action"] == "DescribeProduct"
        assert params["Code"] == "cmapi021863"
        assert params["Format"] == "json"
        assert params["Version"] == "2015-11-01"
        assert params["AccessKeyId"] == "test-id"
        assert params["SignatureMethod"] == "HMAC-SHA1"
        assert params["SignatureVersion"] == "1.0"
        assert re.fullmatch(r"\d{4}-\d\d-\d\dT\d\d:\d\d:\d\dZ", params["Timestamp"])
        assert re.fullmatch(r"[0-9A-Za-z]{64}", params["SignatureNonce"])

    def test_signature_matches_parameters(self, session):
        session.queue(DESCRIBE_PRODUCT)
        client_for(session).get_product("cmapi021863")
        params = session.calls[0]["params"]
        assert params["Signature"] == sign_params(params, "test-secret")

    def test_nonce_changes_per_request(self, session):
        session.queue(DESCRIBE_PRODUCT)
        session.queue(DESCRIBE_PRODUCT)
        client = client_for(session)
        client.get_product("a")
        client.get_product("a")
        assert session.calls[0]["params"]["SignatureNonce"] != session.calls[1]["params"]["SignatureNonce"]

    def test_non_200_raises_with_vendor_code(self, session):
        session.queue(
            {"Code": "InvalidAccessKeyId.NotFound", "Message": "Specified access key is not found.", "RequestId": "x"},
            status_code=404,
        )
        with pytest.raises(MarketAPIError) as excinfo:
            client_for(session).get_product("cmapi021863")
        err = excinfo.value
        assert err.status == 404
        assert err.code == "InvalidAccessKeyId.NotFound"
        assert "Specified access key is not found." in str(err)
        assert err.to_dict()["type"] == "MarketAPIError"

    def test_non_200_without_json_body(self, session):
        session.queue("Bad Gateway", status_code=502)
        with pytest.raises(MarketAPIError) as excinfo:
            client_for(session).get_product("cmapi021863")
        assert excinfo.value.status == 502
        assert excinfo.value.code == ""

    def test_malformed_json_propagates(self, session):
        session.queue("not json")
        with pytest.raises(ValueError):
            client_for(session).get_product("cmapi021863")

    def test_has_credentials(self, monkeypatch):
        monkeypatch.setattr("alicloudslim.market.ALIYUN_ACCESS_KEY_ID", "")
        monkeypatch.setattr("alicloudslim.market.ALIYUN_ACCESS_KEY_SECRET", "")
        assert MarketClient("id", "secret").has_credentials
        assert not MarketClient("id", None).has_credentials
        assert not MarketClient().has_credentials


class TestGetProducts:

    def test_walks_all_pages(self, session):
        session.queue(metering_page(1, 2, 5, ["a", "b"]))
        session.queue(metering_page(2, 2, 5, ["c", "d"]))
        session.queue(metering_page(3, 2, 5, ["e"]))
        products = client_for(session).get_products()
        assert [p.id for p in products] == ["a", "b", "c", "d", "e"]
        assert [c["params"]["pageNum"] for c in session.calls] == ["1", "2", "3"]
        assert all(c["params"]["Action"] == "DescribeApiMetering" for c in session.calls)
        assert all(c["params"]["type"] == "1" for c in session.calls)
        assert products[0] == Product(id="a", name="API a", remaining=1000, used=10, unit="次")

    def test_stops_when_count_is_exact_multiple(self, session):
        session.queue(metering_page(1, 2, 4, ["a", "b"]))
        session.queue(metering_page(2, 2, 4, ["c", "d"]))
        products = client_for(session).get_products()
        assert len(products) == 4
        assert len(session.calls) == 2

    def test_single_page(self, session):
        session.queue(metering_page(1, 20, 3, ["a", "b", "c"]))
        assert len(client_for(session).get_products()) == 3
        assert len(session.calls) == 1

    def test_empty_page_stops(self, session):
        session.queue(metering_page(1, 2, 10, ["a", "b"]))
        session.queue(metering_page(2, 2, 10, []))
        assert len(client_for(session).get_products()) == 2
        assert len(session.calls) == 2

    def test_zero_page_size_stops(self, session):
        session.queue(metering_page(1, 0, 10, ["a"]))
        assert len(client_for(session).get_products()) == 1

    def test_null_quota_and_usage_read_as_zero(self, session):
        page = metering_page(1, 20, 1, ["a"])
        page["Result"][0].update(TotalQuota=None, TotalUsage=None)
        session.queue(page)
        product = client_for(session).get_products()[0]
        assert product.remaining == 0
        assert product.used == 0

    def test_many_pages(self, session):
        pages = 1500
        for n in range(1, pages + 1):
            session.queue(metering_page(n, 1, pages, [f"p{n}"]))
        products = client_for(session).get_products()
        assert len(products) == pages
        assert products[-1].id == f"p{pages}"
        assert session.calls[-1]["params"]["pageNum"] == str(pages)

    def test_unsuccessful_page_raises(self, session):
        session.queue(metering_page(1, 2, 5, ["a", "b"]))
        session.queue({"Success": False, "Code": "Forbidden", "Message": "no permission"})
        with pytest.raises(MarketAPIError) as excinfo:
            client_for(session).get_products()
        assert excinfo.value.code == "Forbidden"
        assert "no permission" in str(excinfo.value)


class TestGetProduct:

    def test_details(self, session):
        session.queue(DESCRIBE_PRODUCT)
        details = client_for(session).get_product("cmapi021863")
        assert details.id == "cmapi021863"
        assert details.name == "全国快递物流查询"
        assert details.description == "快递查询接口"
        assert details.options == [
            ProductOption("yuncode1586300001", "100次"),
            ProductOption("yuncode1586300002", "1000次"),
            ProductOption("yuncode1586300003", "10000次"),
        ]

    def test_extract_options_missing_sections(self):
        assert extract_options({}) == []
        assert extract_options({"ProductSkus": {"ProductSku": [{"Modules": {}}]}}) == []


class TestGetPrice:

    def test_quote(self, session):
        session.queue({
            "ProductCode": "cmapi021863",
            "TradePrice": 0.1,
            "OriginalPrice": 0.1,
            "DiscountPrice": 0.0,
            "Currency": "CNY",
            "Duration": 1,
            "Cycle": "Year",
        })
        option = client_for(session).get_price("cmapi021863", "yuncode1586300001")
        assert option == PricedOption(id="cmapi021863", code="yuncode1586300001", duration=1, cycle="Year", price="0.10")
        params = session.calls[0]["params"]
        assert params["Action"] == "DescribePrice"
        assert params["OrderType"] == "INSTANCE_BUY"
        assert params["Commodity"] == '{"components":{"package_version":"yuncode1586300001"},"productCode":"cmapi021863"}'

    def test_price_rounding(self, session):
        session.queue({"TradePrice": 1999, "Duration": 12, "Cycle": "Month"})
        assert client_for(session).get_price("p", "o").price == "1999.00"

    def test_null_price_and_duration(self, session):
        session.queue({"TradePrice": None, "Duration": None, "Cycle": "Year"})
        option = client_for(session).get_price("p", "o")
        assert option.price == "0.00"
        assert option.duration == 0


class TestCreateOrder:

    OPTION = PricedOption(id="cmapi021863", code="yuncode1586300001", duration=1, cycle="Year", price="0.10")

    def test_parameters(self, session):
        session.queue({"OrderId": "206806419130000", "RequestId": "x"})
        order_id = client_for(session).create_order(self.OPTION)
        assert order_id == "206806419130000"
        params = session.calls[0]["params"]
        assert params["Action"] == "CreateOrder"
        assert params["OrderType"] == "INSTANCE_BUY"
        assert params["PaymentType"] == "AUTO"
        assert re.fullmatch(r"[0-9A-Za-z]{64}", params["ClientToken"])
        assert json.loads(params["Commodity"]) == {
            "components": {"package_version": "yuncode1586300001"},
            "skuCode": "prepay",
            "duration": 1,
            "pricingCycle": "Year",
            "productCode": "cmapi021863",
        }
        assert params["Commodity"].startswith('{"components":')

    def test_overrides(self, session):
        session.queue({"OrderId": "1"})
        client_for(session).create_order(self.OPTION, PaymentType="HAND", OrderType="INSTANCE_RENEW", Ignored=3)
        params = session.calls[0]["params"]
        assert params["PaymentType"] == "HAND"
        assert params["OrderType"] == "INSTANCE_RENEW"
        assert "Ignored" not in params
        assert params["Signature"] == sign_params(params, "test-secret")

    def test_transport_error_propagates(self):
        class BrokenSession:
            def get(self, *args, **kwargs):
                raise requests.Timeout("slow")

        with pytest.raises(requests.Timeout):
            client_for(BrokenSession()).create_order(self.OPTION)
