"""
Data-access code generation.

Builds the typed data context class: CRUD methods for every table and one
method per stored procedure. Method and parameter names always come from
the object name provider, so they match the names used by the model and
mapper files.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from jinja2 import Environment

from ..constants import (
    DefaultConfig,
    GenerationOptions,
    NamingDefaults,
    STRUCTURED_SQL_DB_TYPE,
    TypeCategories,
)
from ..domain.models import (
    ClassDefinition,
    DatabaseSchema,
    DbColumn,
    DbTable,
    PropertyDefinition,
    SqlParameter,
    SqlStoredProcedure,
)
from ..domain.naming import get_object_name_provider, unescape_identifier
from ..domain.type_mapping import SqlToCSharpTypeMapper
from ..options import ReverseSqlOptions
from .base import (
    csharp_string_literal,
    pluralize,
    render_template,
    setup_jinja_env,
    sql_object_name,
    sql_quote_identifier,
)


logger = logging.getLogger(__name__)

INDENT = GenerationOptions.DEFAULT_INDENT

ColumnProperty = Tuple[DbColumn, PropertyDefinition]


@dataclass
class MethodDefinition:
    """A method of the generated data context class."""

    name: str
    return_type: str
    parameters: List[str] = field(default_factory=list)
    body: List[str] = field(default_factory=list)
    summary: Optional[str] = None
    access_modifier: str = "public"
    is_static: bool = False

    @property
    def signature(self) -> str:
        modifiers = f"{self.access_modifier} static" if self.is_static else self.access_modifier
        return f"{modifiers} {self.return_type} {self.name}({', '.join(self.parameters)})"


def data_table_method_name(table_type_class_name: str) -> str:
    """Name of the helper converting table-type rows to a DataTable."""
    return f"To{unescape_identifier(table_type_class_name)}DataTable"


def _indent(lines: Sequence[str], level: int = 1) -> List[str]:
    return [f"{INDENT * level}{line}" if line else line for line in lines]


def _block(header: str, lines: Sequence[str]) -> List[str]:
    return [header, "{", *_indent(lines), "}"]


def _sql_parameter_name(index: int) -> str:
    return f"@p{index}"


def _column_list(columns: Sequence[DbColumn]) -> str:
    return ", ".join(sql_quote_identifier(col.name or "") for col in columns)


def _predicate(columns: Sequence[DbColumn], first_index: int) -> str:
    return " AND ".join(
        f"{sql_quote_identifier(col.name or '')} = {_sql_parameter_name(first_index + offset)}"
        for offset, col in enumerate(columns)
    )


class DataAccessWriter:
    """
    Writes the data context class for a schema.

    The writer consumes the class definitions produced by the class
    builders; it looks classes up by the names the object name provider
    gives, so custom providers stay consistent across all generated files.
    """

    def __init__(
        self,
        options: Optional[ReverseSqlOptions] = None,
        namespace: str = DefaultConfig.NAMESPACE,
        class_name: str = DefaultConfig.DATA_CONTEXT_CLASS_NAME,
    ):
        self.object_name_provider = get_object_name_provider(options)
        self.namespace = namespace
        self.class_name = class_name

    # --- Parameter helpers ---

    @staticmethod
    def _create_parameter_call(
        sql_name: str,
        sql_type_name: str,
        value: str,
        length: Optional[int] = None,
        precision: Optional[int] = None,
        scale: Optional[int] = None,
        db_type: Optional[str] = None,
        is_output: bool = False,
    ) -> str:
        normalized = SqlToCSharpTypeMapper.normalize(sql_type_name)
        args = [
            csharp_string_literal(sql_name),
            f"SqlDbType.{db_type or SqlToCSharpTypeMapper.map_db_type(sql_type_name)}",
            value,
        ]
        if normalized in TypeCategories.SIZED_SQL_TYPES:
            # Output buffers need an explicit size
            if length is None and is_output:
                length = TypeCategories.MAX_SIZE
            if length is not None:
                args.append(f"size: {length}")
        if normalized in TypeCategories.PRECISION_SQL_TYPES:
            if precision is not None:
                args.append(f"precision: {precision}")
            if scale is not None:
                args.append(f"scale: {scale}")
        return f"CreateParameter({', '.join(args)})"

    def _add_column_parameters(self, pairs: Sequence[ColumnProperty], value_prefix: str, first_index: int = 0) -> List[str]:
        lines = []
        for offset, (col, prop) in enumerate(pairs):
            call = self._create_parameter_call(
                _sql_parameter_name(first_index + offset),
                col.sql_type_name,
                f"{value_prefix}{prop.name}",
                col.length,
                col.precision,
                col.scale,
            )
            lines.append(f"sqlCommand.Parameters.Add({call});")
        return lines

    def _column_parameter_name(self, column: DbColumn) -> str:
        name = column.name or f"{NamingDefaults.POSITIONAL_COLUMN_PREFIX}{column.ordinal}"
        return self.object_name_provider.get_parameter_name(
            SqlParameter(name=name, sql_type_name=column.sql_type_name, ordinal=column.ordinal)
        )

    @staticmethod
    def _command_block(command_text: str, setup: Sequence[str], execute: Sequence[str], stored_procedure: bool = False) -> List[str]:
        inner = [f"sqlCommand.CommandText = {csharp_string_literal(command_text)};"]
        if stored_procedure:
            inner.append("sqlCommand.CommandType = CommandType.StoredProcedure;")
        inner.extend(setup)
        inner.append("sqlConnection.Open();")
        inner.extend(execute)
        return [
            "using (var sqlConnection = new SqlConnection(_connectionString))",
            "using (var sqlCommand = sqlConnection.CreateCommand())",
            "{",
            *_indent(inner),
            "}",
        ]

    @staticmethod
    def _read_all(class_name: str, mapper_name: str) -> List[str]:
        return [
            f"var resultRows = new List<{class_name}>();",
            *_block("using (var dataReader = sqlCommand.ExecuteReader())", _block(
                "while (dataReader.Read())",
                [f"resultRows.Add({mapper_name}.Map(dataReader));"],
            )),
        ]

    # --- Table methods ---

    def build_table_methods(self, table: DbTable, table_class: ClassDefinition) -> List[MethodDefinition]:
        """
        Build the CRUD methods for a table.

        Update, delete and select-by-key need a primary key and are left out
        for tables without one.
        """
        pairs: List[ColumnProperty] = list(zip(table.columns, table_class.properties))
        methods = [self._build_insert_method(table, table_class, pairs)]

        if table.has_primary_key:
            update_method = self._build_update_method(table, table_class, pairs)
            if update_method is not None:
                methods.append(update_method)
            methods.append(self._build_delete_method(table, pairs))
            methods.append(self._build_select_by_key_method(table, table_class, pairs))
        else:
            logger.info(
                f"Table '{table.qualified_name}' has no primary key, skipping update, delete and select-by-key methods."
            )

        methods.append(self._build_select_where_method(table, table_class))
        return methods

    def _build_insert_method(self, table: DbTable, table_class: ClassDefinition, pairs: List[ColumnProperty]) -> MethodDefinition:
        table_sql = sql_object_name(table.schema, table.name)
        insertable = [
            (col, prop) for col, prop in pairs
            if not col.is_identity and SqlToCSharpTypeMapper.is_writable(col.sql_type_name)
        ]
        identity = next(((col, prop) for col, prop in pairs if col.is_identity), None)

        if insertable:
            values = ", ".join(_sql_parameter_name(i) for i in range(len(insertable)))
            sql = f"INSERT INTO {table_sql} ({_column_list([c for c, _ in insertable])}) VALUES ({values})"
        else:
            sql = f"INSERT INTO {table_sql} DEFAULT VALUES"

        if identity is not None:
            identity_col, identity_prop = identity
            identity_type = SqlToCSharpTypeMapper.normalize(identity_col.sql_type_name)
            sql += f"; SELECT CAST(SCOPE_IDENTITY() AS {identity_type})"
            execute = [f"entity.{identity_prop.name} = ({identity_prop.declared_type_name})sqlCommand.ExecuteScalar();"]
        else:
            execute = ["sqlCommand.ExecuteNonQuery();"]

        return MethodDefinition(
            name=self.object_name_provider.get_table_insert_method_name(table),
            return_type="void",
            parameters=[f"{table_class.name} entity"],
            body=self._command_block(sql, self._add_column_parameters(insertable, "entity."), execute),
            summary=f"Inserts a {table_class.name} into {table_sql}.",
        )

    def _build_update_method(self, table: DbTable, table_class: ClassDefinition, pairs: List[ColumnProperty]) -> Optional[MethodDefinition]:
        table_sql = sql_object_name(table.schema, table.name)
        keys = [(col, prop) for col, prop in pairs if col.is_primary_key]
        assignments = [
            (col, prop) for col, prop in pairs
            if not col.is_primary_key and not col.is_identity
            and SqlToCSharpTypeMapper.is_writable(col.sql_type_name)
        ]
        if not assignments:
            logger.debug(f"Table '{table.qualified_name}' has no updatable columns, skipping update method.")
            return None

        set_clause = ", ".join(
            f"{sql_quote_identifier(col.name or '')} = {_sql_parameter_name(i)}"
            for i, (col, _) in enumerate(assignments)
        )
        sql = f"UPDATE {table_sql} SET {set_clause} WHERE {_predicate([c for c, _ in keys], len(assignments))}"
        setup = self._add_column_parameters(assignments, "entity.")
        setup += self._add_column_parameters(keys, "entity.", first_index=len(assignments))

        return MethodDefinition(
            name=self.object_name_provider.get_table_update_method_name(table),
            return_type="int",
            parameters=[f"{table_class.name} entity"],
            body=self._command_block(sql, setup, ["return sqlCommand.ExecuteNonQuery();"]),
            summary=f"Updates a {table_class.name} in {table_sql} by its primary key. Returns the number of affected rows.",
        )

    def _key_parameters(self, pairs: List[ColumnProperty]) -> Tuple[List[str], List[str]]:
        """Method parameters and parameter setup lines for the primary key columns."""
        keys = [(col, prop) for col, prop in pairs if col.is_primary_key]
        method_parameters = []
        setup = []
        for index, (col, prop) in enumerate(keys):
            parameter_name = self._column_parameter_name(col)
            method_parameters.append(f"{prop.declared_type_name} {parameter_name}")
            call = self._create_parameter_call(
                _sql_parameter_name(index), col.sql_type_name, parameter_name,
                col.length, col.precision, col.scale,
            )
            setup.append(f"sqlCommand.Parameters.Add({call});")
        return method_parameters, setup

    def _build_delete_method(self, table: DbTable, pairs: List[ColumnProperty]) -> MethodDefinition:
        table_sql = sql_object_name(table.schema, table.name)
        method_parameters, setup = self._key_parameters(pairs)
        sql = f"DELETE FROM {table_sql} WHERE {_predicate(table.primary_key_columns, 0)}"
        return MethodDefinition(
            name=self.object_name_provider.get_table_delete_method_name(table),
            return_type="int",
            parameters=method_parameters,
            body=self._command_block(sql, setup, ["return sqlCommand.ExecuteNonQuery();"]),
            summary=f"Deletes a row from {table_sql} by its primary key. Returns the number of affected rows.",
        )

    def _build_select_by_key_method(self, table: DbTable, table_class: ClassDefinition, pairs: List[ColumnProperty]) -> MethodDefinition:
        table_sql = sql_object_name(table.schema, table.name)
        method_parameters, setup = self._key_parameters(pairs)
        mapper_name = self.object_name_provider.get_result_set_mapper_class_name(table_class.name)
        sql = (
            f"SELECT {_column_list(table.columns)} FROM {table_sql} "
            f"WHERE {_predicate(table.primary_key_columns, 0)}"
        )
        execute = _block(
            "using (var dataReader = sqlCommand.ExecuteReader())",
            [f"return dataReader.Read() ? {mapper_name}.Map(dataReader) : null;"],
        )
        return MethodDefinition(
            name=self.object_name_provider.get_table_select_by_primary_key_method_name(table),
            return_type=table_class.name,
            parameters=method_parameters,
            body=self._command_block(sql, setup, execute),
            summary=f"Selects a {table_class.name} from {table_sql} by its primary key, or null when not found.",
        )

    def _build_select_where_method(self, table: DbTable, table_class: ClassDefinition) -> MethodDefinition:
        table_sql = sql_object_name(table.schema, table.name)
        mapper_name = self.object_name_provider.get_result_set_mapper_class_name(table_class.name)
        sql = f"SELECT {_column_list(table.columns)} FROM {table_sql}"
        setup = [
            *_block("if (!string.IsNullOrWhiteSpace(whereClause))", [
                'sqlCommand.CommandText += " WHERE " + whereClause;',
            ]),
            *_block("if (parameters != null)", ["sqlCommand.Parameters.AddRange(parameters);"]),
        ]
        execute = self._read_all(table_class.name, mapper_name) + ["return resultRows;"]
        return MethodDefinition(
            name=self.object_name_provider.get_table_select_by_expression_method_name(table),
            return_type=f"List<{table_class.name}>",
            parameters=["string whereClause", "params SqlParameter[] parameters"],
            body=self._command_block(sql, setup, execute),
            summary=f"Selects the {pluralize(table_class.name)} from {table_sql} matching a SQL predicate.",
        )

    # --- Table type helpers ---

    def build_table_type_helper(self, table_type: DbTable, table_type_class: ClassDefinition) -> MethodDefinition:
        """Build the helper that packs table-type rows into a DataTable."""
        column_lines = []
        values = []
        for col, prop in zip(table_type.columns, table_type_class.properties):
            column_lines.append(
                f"dataTable.Columns.Add({csharp_string_literal(col.name or '')}, typeof({prop.type_name}));"
            )
            if prop.is_nullable or not SqlToCSharpTypeMapper.can_be_nullable(prop.type_name):
                values.append(f"(object)row.{prop.name} ?? DBNull.Value")
            else:
                values.append(f"row.{prop.name}")

        body = [
            "var dataTable = new DataTable();",
            *column_lines,
            *_block("if (rows != null)", _block(
                "foreach (var row in rows)",
                [f"dataTable.Rows.Add({', '.join(values)});"],
            )),
            "return dataTable;",
        ]
        return MethodDefinition(
            name=data_table_method_name(table_type_class.name),
            return_type="DataTable",
            parameters=[f"IEnumerable<{table_type_class.name}> rows"],
            body=body,
            access_modifier="private",
            is_static=True,
        )

    # --- Stored procedure methods ---

    def _table_type_for(self, parameter: SqlParameter, schema: Optional[DatabaseSchema]) -> DbTable:
        if schema is not None:
            table_type = schema.get_table_type(parameter.table_type_schema, parameter.table_type_name)
            if table_type is not None:
                return table_type
        return DbTable(schema=parameter.table_type_schema, name=parameter.table_type_name)

    def build_stored_procedure_method(
        self,
        sp: SqlStoredProcedure,
        result_class: Optional[ClassDefinition] = None,
        schema: Optional[DatabaseSchema] = None,
    ) -> MethodDefinition:
        """
        Build the method calling a stored procedure.

        OUTPUT parameters become ``ref`` parameters. The method returns the
        mapped rows of the first result set, or the affected-row count when
        the procedure has no result set.
        """
        method_parameters = []
        setup = []
        read_back = []

        for index, parameter in enumerate(sp.parameters):
            parameter_name = self.object_name_provider.get_parameter_name(parameter)
            local_name = f"sqlParameter{index}"
            sql_name = parameter.name
            if not sql_name.startswith(NamingDefaults.SQL_PARAMETER_MARKER):
                sql_name = f"{NamingDefaults.SQL_PARAMETER_MARKER}{sql_name}"

            if parameter.is_table_valued:
                table_type = self._table_type_for(parameter, schema)
                class_name = self.object_name_provider.get_table_type_class_name(table_type)
                declared_type = f"IEnumerable<{class_name}>"
                call = self._create_parameter_call(
                    sql_name, parameter.sql_type_name,
                    f"{data_table_method_name(class_name)}({parameter_name})",
                    db_type=STRUCTURED_SQL_DB_TYPE,
                )
                setup.append(f"var {local_name} = {call};")
                type_name = sql_object_name(table_type.schema, table_type.name)
                setup.append(f"{local_name}.TypeName = {csharp_string_literal(type_name)};")
            else:
                type_name = parameter.object_type_name or SqlToCSharpTypeMapper.map_type(parameter.sql_type_name)
                is_nullable = parameter.is_nullable and SqlToCSharpTypeMapper.can_be_nullable(type_name)
                declared_type = f"{type_name}?" if is_nullable else type_name
                call = self._create_parameter_call(
                    sql_name, parameter.sql_type_name, parameter_name,
                    parameter.length, parameter.precision, parameter.scale,
                    is_output=parameter.is_output,
                )
                setup.append(f"var {local_name} = {call};")

            if parameter.is_output and not parameter.is_table_valued:
                setup.append(f"{local_name}.Direction = ParameterDirection.InputOutput;")
                method_parameters.append(f"ref {declared_type} {parameter_name}")
                read_back.append(
                    f"{parameter_name} = {local_name}.Value == DBNull.Value "
                    f"? default({declared_type}) : ({declared_type}){local_name}.Value;"
                )
            else:
                method_parameters.append(f"{declared_type} {parameter_name}")
            setup.append(f"sqlCommand.Parameters.Add({local_name});")

        procedure_sql = sql_object_name(sp.schema, sp.name)
        if result_class is not None:
            mapper_name = self.object_name_provider.get_result_set_mapper_class_name(result_class.name)
            return_type = f"List<{result_class.name}>"
            execute = self._read_all(result_class.name, mapper_name) + read_back + ["return resultRows;"]
            summary = f"Executes {procedure_sql} and returns its {pluralize(result_class.name)}."
        else:
            return_type = "int"
            execute = ["var affectedRows = sqlCommand.ExecuteNonQuery();", *read_back, "return affectedRows;"]
            summary = f"Executes {procedure_sql}. Returns the number of affected rows."

        return MethodDefinition(
            name=self.object_name_provider.get_stored_procedure_method_name(sp),
            return_type=return_type,
            parameters=method_parameters,
            body=self._command_block(procedure_sql, setup, execute, stored_procedure=True),
            summary=summary,
        )

    # --- Whole class ---

    def build_methods(
        self,
        schema: DatabaseSchema,
        table_classes: Sequence[ClassDefinition] = (),
        table_type_classes: Sequence[ClassDefinition] = (),
        result_set_classes: Sequence[ClassDefinition] = (),
    ) -> List[MethodDefinition]:
        """Build every method of the data context, tables first."""
        provider = self.object_name_provider
        tables_by_name: Dict[str, ClassDefinition] = {c.name: c for c in table_classes}
        table_types_by_name: Dict[str, ClassDefinition] = {c.name: c for c in table_type_classes}
        results_by_name: Dict[str, ClassDefinition] = {c.name: c for c in result_set_classes}

        methods: List[MethodDefinition] = []
        for table in schema.tables:
            table_class = tables_by_name.get(provider.get_table_class_name(table))
            if table_class is None:
                logger.debug(f"No class generated for table '{table.qualified_name}', skipping its methods.")
                continue
            methods.extend(self.build_table_methods(table, table_class))

        for sp in schema.stored_procedures:
            result_class = None
            if sp.has_result_set:
                result_class = results_by_name.get(provider.get_stored_procedure_result_set_class_name(sp))
            methods.append(self.build_stored_procedure_method(sp, result_class, schema))

        for table_type in schema.table_types:
            table_type_class = table_types_by_name.get(provider.get_table_type_class_name(table_type))
            if table_type_class is not None:
                methods.append(self.build_table_type_helper(table_type, table_type_class))

        return methods

    def write(
        self,
        schema: DatabaseSchema,
        table_classes: Sequence[ClassDefinition] = (),
        table_type_classes: Sequence[ClassDefinition] = (),
        result_set_classes: Sequence[ClassDefinition] = (),
        env: Optional[Environment] = None,
    ) -> str:
        """Render the data context class as C# source."""
        methods = self.build_methods(schema, table_classes, table_type_classes, result_set_classes)
        logger.debug(f"Rendering data context '{self.class_name}' with {len(methods)} methods.")
        context = {
            "namespace": self.namespace,
            "usings": GenerationOptions.DATA_CONTEXT_USINGS,
            "class_name": self.class_name,
            "methods": methods,
        }
        return render_template(env or setup_jinja_env(), GenerationOptions.DATA_CONTEXT_TEMPLATE, context)
