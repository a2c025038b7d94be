"""
numbers_contracts.stdlib — reusable building blocks for Numbers contracts.

Modules are plain functions over a `Context` (explicit caller via
`ctx.sender`, explicit storage via `ctx.storage`); contract classes wire them
into exported methods.

- math.safe_uint      checked u256 arithmetic
- access.ownable      single-owner gate
- token.fungible      ERC-20 style ledger
- token.capped        fixed supply cap on top of token.fungible
- token.nonfungible   ERC-721 style registry
- token.royalty       ERC-2981 style royalty info
"""
