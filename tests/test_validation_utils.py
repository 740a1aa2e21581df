import pytest

from utils.validation_utils import (
    validate_email,
    validate_cpf,
    validate_cnpj,
    only_digits,
    parse_verification_code,
    sanitize_input,
)

VALID_CPF = "52998224725"
VALID_CNPJ = "11222333000181"


@pytest.mark.parametrize("email", ["a@b.co", "ana@x.com", "first.last@sub.domain.com.br"])
def test_email_accepts_well_formed(email):
    assert validate_email(email)


@pytest.mark.parametrize("email", ["a@b", "a b@c.com", "", "a@@b.com", "@b.com", "a@b.com ", "ab.com", "a@b.co\n", "\na@b.co"])
def test_email_rejects_malformed(email):
    assert not validate_email(email)


def test_cpf_known_valid():
    assert validate_cpf(VALID_CPF)


def test_cpf_accepts_formatting():
    assert validate_cpf("529.982.247-25")


def test_cpf_flipped_last_digit_fails():
    assert not validate_cpf(VALID_CPF[:-1] + "4")


def test_cpf_flipped_first_check_digit_fails():
    assert not validate_cpf(VALID_CPF[:9] + "3" + VALID_CPF[10])


@pytest.mark.parametrize("digit", "0123456789")
def test_cpf_rejects_repeated_digits(digit):
    assert not validate_cpf(digit * 11)


@pytest.mark.parametrize("cpf", ["5299822472", "529982247250", "", "abcdefghijk"])
def test_cpf_rejects_wrong_length(cpf):
    assert not validate_cpf(cpf)


def test_cnpj_known_valid():
    assert validate_cnpj(VALID_CNPJ)
    assert validate_cnpj("11.222.333/0001-81")


def test_cnpj_mutated_digit_fails():
    assert not validate_cnpj("11222333000191")
    assert not validate_cnpj(VALID_CNPJ[:-1] + "2")


@pytest.mark.parametrize("cnpj", [VALID_CNPJ[:13], VALID_CNPJ + "1", "1" * 13, "1" * 15])
def test_cnpj_rejects_13_and_15_digits(cnpj):
    assert not validate_cnpj(cnpj)


def test_cpf_is_not_a_cnpj():
    assert not validate_cnpj(VALID_CPF)
    assert not validate_cpf(VALID_CNPJ)


def test_only_digits():
    assert only_digits("11.222.333/0001-81") == VALID_CNPJ
    assert only_digits("") == ""


def test_parse_verification_code():
    assert parse_verification_code("482913") == 482913
    assert parse_verification_code(" 000000 ") == 0
    assert parse_verification_code("48a913") is None
    assert parse_verification_code("") is None


@pytest.mark.parametrize("text", ["²", "①", "48291³"])
def test_parse_verification_code_rejects_non_decimal_digits(text):
    assert parse_verification_code(text) is None


def test_sanitize_input():
    assert sanitize_input("  Ana   <b>Maria</b> ") == "Ana bMaria/b"
    assert sanitize_input("x" * 50, max_length=10) == "x" * 10
