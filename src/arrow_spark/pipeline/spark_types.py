class SparkSqlType:
    """
    Spark SQL type keywords emitted in DDL.
    """

    BOOLEAN = "BOOLEAN"
    STRING = "STRING"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    INT = "INT"
    BIGINT = "BIGINT"
    ARRAY = "ARRAY"
    MAP = "MAP"
    STRUCT = "STRUCT"

    @classmethod
    def array(cls, element: str) -> str:
        return f"{cls.ARRAY}<{element}>"

    @classmethod
    def map(cls, key: str, value: str) -> str:
        # No space after the comma, unlike STRUCT members
        return f"{cls.MAP}<{key},{value}>"

    @classmethod
    def struct(cls, members) -> str:
        """
        members: iterable of (name, type_string) pairs
        """
        body = ", ".join(f"{name}: {type_string}" for name, type_string in members)
        return f"{cls.STRUCT}<{body}>"
