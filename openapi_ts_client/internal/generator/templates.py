import json
from typing import List

from ..types.models import NormalizedOperation


class Templates:
    """Шаблоны для генерации модуля"""

    imports = [
        "/* eslint-disable */",
        "import { toFormData } from 'axios'",
        "import type { AxiosResponse, AxiosRequestConfig, AxiosInstance } from 'axios'",
    ]

    helpers = """type PickData<T> = T extends { data?: any } ? T['data'] : any
const interpolatePath = (str: string, values: any) => str.replace(/{([^{}]+)}/g, (_, g1) => values[g1])
"""

    operation = """/**
 * @summary {request_line}
 * @path {summary}
 */
function {operation_id}() {{
  const __path = {request_line_literal} as const;
  const __url = __path.slice({method_offset});

{interface_code}

  type __Config = {config_type};
  const __request = {request_fn};

  return {{
    [__path]: [
      0 as unknown as __BaseTypes__ & {{ ResponseData: PickData<__BaseTypes__["Response"]> }},
      __request
    ] as const
  }};
}}
"""

    static_types = """export type Collection = ReturnType<typeof collectApis>
export type Keys = keyof Collection
export type ApiTypes<K extends Keys> = Collection[K][0]
export type ApiRequestParams<K extends Keys> = Parameters<Collection[K][1]>

export type ApiDataTypes<K extends Keys, T extends keyof ApiTypes<Keys>> = ApiTypes<K>[T]

export function createRequest(axios: AxiosInstance) {
  const collections = collectApis()

  return function request<K extends Keys, U = any>(key: K) {
    const fn = collections[key][1] as (...args: any[]) => AxiosRequestConfig;

    return (...args: ApiRequestParams<K>) => axios(fn(...args)) as Promise<U>
  }
}

type Arg<K extends Keys> = ApiRequestParams<K>
type BaseResp<K extends Keys, U extends "Response" | "ResponseData"> = Promise<AxiosResponse<ApiDataTypes<K, U>>>;
"""

    create_axios_api = """export function createAxiosAPI(axios: AxiosInstance) {
  return createRequest(axios) as BaseRequest<'Response'>
}
"""

    def collect_apis(self, operations: List[NormalizedOperation]) -> str:
        """Фабрика, собирающая все операции в одну карту по ключу"""
        if not operations:
            return "const collectApis = () => ({});\n"

        entries = "\n".join(f"  ...{el.operation_id}()," for el in operations)
        return f"const collectApis = () => ({{\n{entries}\n}});\n"

    def base_request(self, operations: List[NormalizedOperation]) -> str:
        """Перегрузки request(key) для каждой операции"""
        overloads = []
        for el in operations:
            summary = (el.summary or "").replace("*/", "*\\/")
            overloads.append(
                f"  /** @summary {summary} */\n"
                f"  <K extends {json.dumps(el.extra.request_line)}>(key: K): (...args: Arg<K>) => BaseResp<K, T>;"
            )
        body = ("\n" + "\n\n".join(overloads) + "\n") if overloads else ""
        return f'export interface BaseRequest<T extends "Response" | "ResponseData"> {{{body}}}\n'

    def epilogue(self, operations: List[NormalizedOperation]) -> str:
        return "\n".join(
            [
                self.collect_apis(operations),
                self.static_types,
                self.base_request(operations),
                self.create_axios_api,
            ]
        )


templates = Templates()
