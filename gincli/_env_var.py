def env_var_split(
    val: str,
    *,
    delimiter: str | None = ",",
) -> list[str]:
    """Split a single environment-variable value into list elements.

    Leading/trailing whitespace of each output element will be stripped,
    and empty elements are dropped.

    This function is used by list-valued flags such as :class:`~gincli.StringSliceFlag`.

    Parameters
    ----------
    val: str
        String to split.
    delimiter: str | None
        Delimiter to split ``val`` on.
        If None, split on whitespace.

    Returns
    -------
    list[str]
        List of individual string tokens.
    """
    return [x.strip() for x in val.split(delimiter) if x.strip()]
